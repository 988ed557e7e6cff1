from fastapi import APIRouter

from ..schemas import CategoryOut
from ..services.categories import (
    CATEGORIES,
    CATEGORY_LABELS,
    category_bounds,
    initial_rating,
)

router = APIRouter(prefix="/categories", tags=["categories"])


# GET /api/v0/categories
@router.get("", response_model=list[CategoryOut])
async def list_categories() -> list[CategoryOut]:
    """Categories from lowest (8va) to highest (1ra) with their rating bands."""
    categories = []
    for category in CATEGORIES:
        lower, upper = category_bounds(category)
        categories.append(
            CategoryOut(
                id=category,
                label=CATEGORY_LABELS[category],
                initialRating=initial_rating(category),
                minRating=lower,
                maxRating=upper,
            )
        )
    return categories
