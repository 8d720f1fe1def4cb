"""Resilient regional enrichment client for material carbon coefficients."""

__version__ = "0.1.0"
