"""Magazenn categories microservice."""
