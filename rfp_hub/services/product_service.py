from fastapi import HTTPException, status as http_status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from rfp_hub.models.project import Product
from rfp_hub.models.rfp import RfpItem
from rfp_hub.schemas.common import PageParams
from rfp_hub.schemas.project import ProductCreate, ProductUpdate

logger = structlog.get_logger()

PRODUCT_SORT_COLUMNS = {
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
    "name": Product.name,
    "category": Product.category,
}


async def get_product(db: AsyncSession, product_id: int, project_id: int) -> Product:
    result = await db.execute(
        select(Product).where(Product.id == product_id, Product.project_id == project_id)
    )
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


async def create_product(db: AsyncSession, project_id: int, body: ProductCreate) -> Product:
    product = Product(project_id=project_id, **body.model_dump())
    db.add(product)
    await db.flush()
    await db.refresh(product)
    logger.info("product_created", product_id=product.id, project_id=project_id)
    return product


async def list_products(
    db: AsyncSession, project_id: int, params: PageParams
) -> tuple[list[Product], int]:
    q = select(Product).where(Product.project_id == project_id)
    count_q = select(func.count(Product.id)).where(Product.project_id == project_id)
    if params.search:
        pattern = f"%{params.search}%"
        search_filter = or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
        q = q.where(search_filter)
        count_q = count_q.where(search_filter)

    total = (await db.execute(count_q)).scalar() or 0
    result = await db.execute(
        q.order_by(params.order_by(PRODUCT_SORT_COLUMNS), Product.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    return list(result.scalars().all()), total


async def list_products_by_category(
    db: AsyncSession, project_id: int, category: str
) -> list[Product]:
    result = await db.execute(
        select(Product)
        .where(Product.project_id == project_id, Product.category == category)
        .order_by(Product.name.asc())
    )
    return list(result.scalars().all())


async def update_product(
    db: AsyncSession, product_id: int, project_id: int, body: ProductUpdate
) -> Product:
    product = await get_product(db, product_id, project_id)
    changes = body.model_dump(exclude_unset=True)
    for key in ("name", "category"):
        if key in changes and changes[key] is None:
            del changes[key]
    for field, value in changes.items():
        setattr(product, field, value)
    await db.flush()
    await db.refresh(product)
    logger.info("product_updated", product_id=product_id, fields=sorted(changes))
    return product


async def delete_product(db: AsyncSession, product_id: int, project_id: int) -> None:
    product = await get_product(db, product_id, project_id)

    references = (
        await db.execute(select(func.count(RfpItem.id)).where(RfpItem.product_id == product_id))
    ).scalar() or 0
    if references:
        raise HTTPException(
            status_code=http_status.HTTP_409_CONFLICT,
            detail="Product is referenced by existing RFPs and cannot be deleted",
        )

    await db.delete(product)
    await db.flush()
    logger.info("product_deleted", product_id=product_id, project_id=project_id)
