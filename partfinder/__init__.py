"""
Part Alternative Finder - AI-assisted component alternatives and comparisons
"""
__version__ = "1.0.0"
