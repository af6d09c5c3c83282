"""Shared helpers of the core: numbers, text, errors and data contracts."""
