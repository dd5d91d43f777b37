"""Test suite for the rotation engine."""
