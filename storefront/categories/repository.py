from sqlalchemy import func, select
from storefront.schema.full_schema import Category


async def list_categories(session):
    stmt = select(Category).order_by(Category.name.asc())
    res = await session.execute(stmt)
    return res.scalars().all()


async def category_by_id(session,category_id):
    res = await session.execute(select(Category).where(Category.id == category_id))
    return res.scalar_one_or_none()


async def category_by_name_ci(session,name):
    stmt = select(Category).where(func.lower(Category.name) == name.lower())
    res = await session.execute(stmt)
    return res.scalars().first()


def category_out(category) -> dict:
    return {"id": category.id, "name": category.name, "description": category.description}
