"""Shared helpers used across analysis stages."""

from .dataset import InputSchemaError, load_postings

__all__ = ["InputSchemaError", "load_postings"]
