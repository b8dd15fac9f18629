"""Credential-hiding proxy for the Pexels video search API."""

__version__ = "1.0.0"
