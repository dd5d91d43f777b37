"""Rotation correction and the detection entry point."""
