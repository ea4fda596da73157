"""
Data Transformation Module
"""
from .cleaners import CleaningResult, CompletenessReport, DataCleaner, clean_orders, normalize_column_name
from .features import FeatureDeriver, derive_features, discount_bucket_labels

__all__ = [
    "CleaningResult",
    "CompletenessReport",
    "DataCleaner",
    "clean_orders",
    "normalize_column_name",
    "FeatureDeriver",
    "derive_features",
    "discount_bucket_labels",
]
