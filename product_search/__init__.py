"""
Catalog semantic search: vector index over the product catalog plus grounded answers.
"""

__version__ = "1.0.0"
