"""Pydantic models for the category endpoints and the common error body."""
