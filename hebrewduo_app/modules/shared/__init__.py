"""Helpers shared across feature modules."""
