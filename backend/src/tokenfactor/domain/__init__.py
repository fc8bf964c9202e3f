"""
Domain package - Core business logic with no external dependencies.

This package contains the pure Python asset models, fixed-point helpers and
the formula engine that derive every figure of a factored invoice.
"""
