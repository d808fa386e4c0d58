"""
Record normalization and column type inference.
"""
