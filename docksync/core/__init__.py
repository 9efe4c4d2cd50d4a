"""
Pipeline components: classification, crawling, synthesis, publishing and
the progress log.
"""
