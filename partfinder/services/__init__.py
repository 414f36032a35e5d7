"""
Service layer - search, extraction, aggregation, prompting and generation
"""
