"""Moderation case linkage: audit logs for sanctions attached to moderation cases."""

__version__ = "0.1.0"
