"""Esquemas pydantic de request/response."""
