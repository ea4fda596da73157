"""
Superstore Retail Analytics
Configuration Module
"""
from .settings import InputSettings, ReportSettings, Settings, get_settings

__all__ = ["InputSettings", "ReportSettings", "Settings", "get_settings"]
