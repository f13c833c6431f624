"""Pydantic request schemas."""
