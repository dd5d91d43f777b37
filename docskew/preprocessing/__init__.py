"""Smoothing, thresholding and edge extraction."""
