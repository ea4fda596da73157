"""
Machine Learning Module
"""
from .regression import PROFIT_FORMULA, FittedProfitModel, ProfitModel, fit_profit_model

__all__ = ["PROFIT_FORMULA", "FittedProfitModel", "ProfitModel", "fit_profit_model"]
