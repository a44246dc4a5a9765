"""Thesis Archive analytics backend: visit tracking and trending keywords."""

__version__ = "0.1.0"
