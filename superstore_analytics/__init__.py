"""
Superstore Retail Analytics
Batch analysis of the Superstore order-line dataset.
"""

__version__ = "1.0.0"
