"""Logging, error, and validation utilities for hwexact."""
