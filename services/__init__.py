"""
Service layer for business logic.

This package contains the service that orchestrates the CSV analysis
pipeline: parsing, column detection, normalization, sign interpretation,
analytics and result assembly.
"""
