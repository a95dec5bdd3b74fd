"""Schemas, provider configuration and tracing hooks for AI model requests."""

__version__ = "0.1.0"
__all__ = ["schemas", "provider", "meta", "tracing"]