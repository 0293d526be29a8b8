"""
Store sales upload pipeline: decode, aggregate, and sync to Google Sheets.
"""

__version__ = "0.1.0"
