"""
Shared utilities (configuration).
"""
