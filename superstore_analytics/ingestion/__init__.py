"""
Data Ingestion Module
"""
from .loader import LoadResult, OrderLoader, load_orders

__all__ = ["LoadResult", "OrderLoader", "load_orders"]
