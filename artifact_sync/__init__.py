"""Detects drift in generated artifacts and pushes or reports it from CI."""

__version__ = "0.1.0"
