"""Meal and weight logging backend."""

__version__ = "0.1.0"
