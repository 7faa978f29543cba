"""
Data Ingestion Module

Turns exported level data into raw level rows for the metrics engine:
- CSV / JSON level files
- Provider-style rows (Date/Close), closing prices and cumulative
  performance series
"""

__version__ = "0.1.0"
