"""Submittal packet generator: fills the submittal form and merges product documents into one PDF."""

__version__ = "1.0.0"
