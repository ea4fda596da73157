"""
Synthetic Data Module
"""
from .generators import SuperstoreGenerator, write_superstore_csv

__all__ = ["SuperstoreGenerator", "write_superstore_csv"]
