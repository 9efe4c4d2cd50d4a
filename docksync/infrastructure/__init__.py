"""
Cross-cutting infrastructure for docksync: logging, errors, retries and
rate limiting.
"""
