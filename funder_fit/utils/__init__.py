"""Utility modules for funder fit analysis."""
