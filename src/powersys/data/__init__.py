"""Data files distributed with the package."""
