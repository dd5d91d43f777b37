"""Skew angle estimators and candidate fusion."""
