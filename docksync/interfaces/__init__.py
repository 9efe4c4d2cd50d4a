"""
Caller-facing surfaces: the Python API and the command line.
"""
