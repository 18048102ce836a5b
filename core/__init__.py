"""
Core modules of the SpendScope CSV analysis engine.

This package contains:
- analytics: Totals, aggregates, anomalies and recurring payments
- categories: Keyword category rules
- config: Application configuration and settings
- exceptions: Custom exception classes
- logger: Logging configuration
- matching: Column detection from header names
- normalize: Row normalization and sign interpretation
- parsing: CSV text parsing
- schema: Pydantic models for the analysis result
"""
