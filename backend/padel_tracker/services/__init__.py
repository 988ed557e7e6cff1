"""Padel domain services: scoring checks, the category table and rating procedures."""

from .validation import (
    ValidationError,
    validate_lineup,
    validate_match_date,
    validate_match_score,
)
from .categories import category_for_rating, initial_rating

__all__ = [
    "ValidationError",
    "validate_lineup",
    "validate_match_date",
    "validate_match_score",
    "category_for_rating",
    "initial_rating",
]
