"""
HTTP transport for the SpendScope analysis engine.
"""
