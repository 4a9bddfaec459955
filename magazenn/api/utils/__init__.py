"""Helpers shared by the API layer, such as the orjson response class."""
