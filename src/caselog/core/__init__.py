"""Core configuration for caselog."""
