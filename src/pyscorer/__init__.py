"""Scorebook analytics and seating store."""

__version__ = "0.1.0"
