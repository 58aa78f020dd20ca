"""Project management: customer-owned containers for products and RFPs."""

from typing import Optional

from fastapi import HTTPException, status as http_status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from rfp_hub.models.project import Project, Product
from rfp_hub.models.rfp import Rfp, RfpItem
from rfp_hub.schemas.common import PageParams
from rfp_hub.schemas.project import ProjectCreate, ProjectUpdate
from rfp_hub.services.rfp_service import purge_rfps

logger = structlog.get_logger()

PROJECT_SORT_COLUMNS = {
    "createdAt": Project.created_at,
    "updatedAt": Project.updated_at,
    "title": Project.title,
    "status": Project.status,
    "startDate": Project.start_date,
    "endDate": Project.end_date,
}

PROJECT_LIST_EXPANSION = (
    selectinload(Project.customer),
    selectinload(Project.products),
)

PROJECT_DETAIL_EXPANSION = PROJECT_LIST_EXPANSION + (
    selectinload(Project.rfps).selectinload(Rfp.items).selectinload(RfpItem.product),
    selectinload(Project.rfps).selectinload(Rfp.proposals),
)


def _scoped(q, owner_id: Optional[int]):
    if owner_id is not None:
        q = q.where(Project.customer_id == owner_id)
    return q


async def get_owned_project(
    db: AsyncSession, project_id: int, owner_id: Optional[int]
) -> Project:
    """Project visible to the caller; foreign projects are reported as missing."""
    result = await db.execute(_scoped(select(Project).where(Project.id == project_id), owner_id))
    project = result.scalar_one_or_none()
    if not project:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


async def load_project(db: AsyncSession, project_id: int, detailed: bool = False) -> Project:
    options = PROJECT_DETAIL_EXPANSION if detailed else PROJECT_LIST_EXPANSION
    result = await db.execute(
        select(Project)
        .options(*options)
        .where(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_project(db: AsyncSession, customer_id: int, body: ProjectCreate) -> Project:
    project = Project(customer_id=customer_id, **body.model_dump())
    db.add(project)
    await db.flush()
    logger.info("project_created", project_id=project.id, customer_id=customer_id)
    return await load_project(db, project.id)


async def list_projects(
    db: AsyncSession, owner_id: Optional[int], params: PageParams
) -> tuple[list[Project], int]:
    q = _scoped(select(Project), owner_id)
    count_q = _scoped(select(func.count(Project.id)), owner_id)
    if params.search:
        pattern = f"%{params.search}%"
        search_filter = or_(Project.title.ilike(pattern), Project.description.ilike(pattern))
        q = q.where(search_filter)
        count_q = count_q.where(search_filter)

    total = (await db.execute(count_q)).scalar() or 0
    result = await db.execute(
        q.options(*PROJECT_LIST_EXPANSION)
        .order_by(params.order_by(PROJECT_SORT_COLUMNS), Project.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    return list(result.scalars().all()), total


async def get_project(db: AsyncSession, project_id: int, owner_id: Optional[int]) -> Project:
    await get_owned_project(db, project_id, owner_id)
    return await load_project(db, project_id, detailed=True)


async def update_project(
    db: AsyncSession, project_id: int, owner_id: Optional[int], body: ProjectUpdate
) -> Project:
    project = await get_owned_project(db, project_id, owner_id)
    changes = body.model_dump(exclude_unset=True)
    for key in ("title", "status"):
        if key in changes and changes[key] is None:
            del changes[key]

    start = changes.get("start_date", project.start_date)
    end = changes.get("end_date", project.end_date)
    if start and end and end < start:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="endDate must be on or after startDate",
        )

    for field, value in changes.items():
        setattr(project, field, value)
    await db.flush()
    logger.info("project_updated", project_id=project_id, fields=sorted(changes))
    return await load_project(db, project_id)


async def delete_project(db: AsyncSession, project_id: int, owner_id: Optional[int]) -> None:
    await get_owned_project(db, project_id, owner_id)

    rfp_ids = (await db.execute(select(Rfp.id).where(Rfp.project_id == project_id))).scalars().all()
    await purge_rfps(db, list(rfp_ids))
    await db.execute(delete(Product).where(Product.project_id == project_id))
    await db.execute(delete(Project).where(Project.id == project_id))
    await db.flush()
    logger.info("project_deleted", project_id=project_id, rfps_removed=len(rfp_ids))
