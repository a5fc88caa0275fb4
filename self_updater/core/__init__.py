"""
Core models, errors and the archive extractor.
"""
