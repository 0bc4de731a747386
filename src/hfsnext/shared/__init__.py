"""Shared utilities, constants and error types for hfsnext."""
