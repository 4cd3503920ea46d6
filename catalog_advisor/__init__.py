"""
Catalog Advisor Service
=======================

Product recommendation service for uploaded PDF catalogs.

Features:
- PDF catalog text extraction
- Layered product extraction (patterns, LLM, line heuristics)
- Fuzzy product deduplication with synthetic SKUs
- Rule-based recommendation scoring with LLM explanations

"""

__version__ = "1.0.0"
