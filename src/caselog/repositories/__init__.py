"""Data access helpers."""

from .case_repo import CaseRepository

__all__ = ["CaseRepository"]
