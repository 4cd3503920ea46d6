"""Shared utilities: logging, errors, price parsing."""
