"""Shared helpers used across activity modules."""
