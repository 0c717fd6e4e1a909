"""Application package for the student management backend.

This package exposes the model, repository and service modules used by
the FastAPI application and the bootstrap scripts. It is intentionally
lightweight; individual modules contain the concrete implementations and
documentation.
"""
