from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.categories.models import CategoryCreateIn
from storefront.categories.repository import category_by_name_ci, category_out, list_categories
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.schema.full_schema import Category
from storefront.categories.constants import logger

categories_router = APIRouter()


@categories_router.get("/list")
async def get_categories(session: AsyncSession = Depends(get_session)):
    categories = await list_categories(session)
    items = [category_out(c) for c in categories]
    return success_response({"message": "Categories loaded", "categories": items, "total": len(items)})


@categories_router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreateIn, session: AsyncSession = Depends(get_session)):

    name = (payload.nome or "").strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category name is required")

    logger.info("category.create.attempt", extra={"category_name": name})

    if await category_by_name_ci(session,name):
        logger.warning("category.create.duplicate", extra={"category_name": name})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A category with this name already exists")

    description = (payload.descricao or "").strip() or None
    category = Category(name=name, description=description)
    session.add(category)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A category with this name already exists")

    logger.info("category.create.success", extra={"category_id": category.id})
    return success_response({"message": "Category created", "category": category_out(category)},
                            status_code=status.HTTP_201_CREATED)
