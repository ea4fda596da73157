"""
Analytics Module
"""
from .aggregator import Reducer, aggregate, measure_name, pivot
from .sections import REPORT_SECTIONS, ReportSection, SectionResult, build_report_sections

__all__ = [
    "Reducer",
    "aggregate",
    "measure_name",
    "pivot",
    "REPORT_SECTIONS",
    "ReportSection",
    "SectionResult",
    "build_report_sections",
]
