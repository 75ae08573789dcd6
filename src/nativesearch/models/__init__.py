"""Pydantic models for artifacts and configuration."""
