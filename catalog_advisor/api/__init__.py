"""HTTP API for the catalog advisor."""
