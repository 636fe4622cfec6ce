"""POST /v1/categories/match - Category matching endpoint"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from carteira_gateway.api.v1.schemas import CategoryMatchRequest, CategoryMatchResponse
from carteira_gateway.domain.categories import match_category
from carteira_gateway.infrastructure.database.repositories import CategoryRepository
from carteira_gateway.infrastructure.database.session import get_db

router = APIRouter()


@router.post("/categories/match", response_model=CategoryMatchResponse)
def match(request_body: CategoryMatchRequest, db: Session = Depends(get_db)):
    """Pick the stored category that best fits a description"""
    categories = CategoryRepository(db).list_categories()
    if not categories:
        raise HTTPException(status_code=404, detail="No categories configured")

    category_id = match_category(request_body.description, categories)
    category = next(c for c in categories if c.id == category_id)

    return CategoryMatchResponse(category_id=category.id, name=category.name, emoji=category.emoji)
