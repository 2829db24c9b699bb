#!/usr/bin/env python3
"""
Core data models for Core Web Vitals tracking.

Contains all data structures used throughout the application.
"""

from .metrics import MetricSet
from .analysis import AnalysisRecord, Strategy

__all__ = ['MetricSet', 'AnalysisRecord', 'Strategy']
