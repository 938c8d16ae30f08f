"""Adapters – concrete unit-of-work implementations."""
