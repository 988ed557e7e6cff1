"""Scoring rules for padel matches."""

from . import padel

__all__ = ["padel"]
