"""
RFP lifecycle: creation, updates, the activation toggle and supplier visibility.

An RFP accepts proposals only while it is *available*:

    status == ACTIVE  and  is_active  and  end_date >= now

The same predicate drives the supplier listing, the supplier detail view and
proposal creation, so the three can never disagree.
"""

from datetime import datetime
from typing import Optional, Sequence

from fastapi import HTTPException, status as http_status
from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from rfp_hub.database import utcnow
from rfp_hub.models.project import Project, Product
from rfp_hub.models.proposal import Proposal, ProposalItem
from rfp_hub.models.rfp import Rfp, RfpItem
from rfp_hub.schemas.common import PageParams
from rfp_hub.schemas.rfp import RfpCreate, RfpUpdate

logger = structlog.get_logger()

RFP_SORT_COLUMNS = {
    "createdAt": Rfp.created_at,
    "updatedAt": Rfp.updated_at,
    "title": Rfp.title,
    "status": Rfp.status,
    "startDate": Rfp.start_date,
    "endDate": Rfp.end_date,
}

_ITEMS_WITH_PRODUCT = selectinload(Rfp.items).selectinload(RfpItem.product)

RFP_EXPANSION = (
    selectinload(Rfp.project),
    _ITEMS_WITH_PRODUCT,
    selectinload(Rfp.proposals),
)

_PROPOSALS_IN_FULL = (
    selectinload(Rfp.proposals).selectinload(Proposal.supplier),
    selectinload(Rfp.proposals)
    .selectinload(Proposal.items)
    .selectinload(ProposalItem.rfp_item)
    .selectinload(RfpItem.product),
)

RFP_DETAIL_EXPANSION = (selectinload(Rfp.project), _ITEMS_WITH_PRODUCT) + _PROPOSALS_IN_FULL

RFP_COMPARISON_EXPANSION = (_ITEMS_WITH_PRODUCT,) + _PROPOSALS_IN_FULL

RFP_PUBLIC_EXPANSION = (
    selectinload(Rfp.project).selectinload(Project.customer),
    _ITEMS_WITH_PRODUCT,
    selectinload(Rfp.proposals),
)


def available_for_proposals(now: Optional[datetime] = None):
    """SQL criterion for RFPs currently accepting proposals."""
    now = now or utcnow()
    return and_(
        Rfp.status == "ACTIVE",
        Rfp.is_active.is_(True),
        Rfp.end_date >= now,
    )


def _not_found(message: str = "RFP not found") -> HTTPException:
    return HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail=message)


async def _load_rfp(db: AsyncSession, rfp_id: int, options=RFP_EXPANSION) -> Rfp:
    result = await db.execute(
        select(Rfp)
        .options(*options)
        .where(Rfp.id == rfp_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _get_scoped_rfp(db: AsyncSession, rfp_id: int, project_id: int) -> Rfp:
    result = await db.execute(
        select(Rfp).where(Rfp.id == rfp_id, Rfp.project_id == project_id)
    )
    rfp = result.scalar_one_or_none()
    if not rfp:
        raise _not_found()
    return rfp


async def purge_rfps(db: AsyncSession, rfp_ids: Sequence[int]) -> None:
    """Delete RFPs and everything hanging off them, children first."""
    if not rfp_ids:
        return
    proposal_ids = select(Proposal.id).where(Proposal.rfp_id.in_(rfp_ids))
    await db.execute(delete(ProposalItem).where(ProposalItem.proposal_id.in_(proposal_ids)))
    await db.execute(delete(Proposal).where(Proposal.rfp_id.in_(rfp_ids)))
    await db.execute(delete(RfpItem).where(RfpItem.rfp_id.in_(rfp_ids)))
    await db.execute(delete(Rfp).where(Rfp.id.in_(rfp_ids)))


# ---------- customer side ----------

async def create_rfp(db: AsyncSession, project_id: int, body: RfpCreate) -> Rfp:
    product_ids = {item.product_id for item in body.items}
    owned = set(
        (
            await db.execute(
                select(Product.id).where(
                    Product.id.in_(product_ids), Product.project_id == project_id
                )
            )
        ).scalars().all()
    )
    foreign = product_ids - owned
    if foreign:
        logger.info("rfp_foreign_products", project_id=project_id, product_ids=sorted(foreign))
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail="Some products do not belong to this project",
        )

    rfp = Rfp(
        project_id=project_id,
        title=body.title,
        description=body.description,
        status="ACTIVE",
        is_active=True,
        start_date=body.start_date,
        end_date=body.end_date,
    )
    db.add(rfp)
    await db.flush()

    for item in body.items:
        db.add(
            RfpItem(
                rfp_id=rfp.id,
                product_id=item.product_id,
                quantity=item.quantity,
                notes=item.notes,
            )
        )
    await db.flush()
    logger.info("rfp_created", rfp_id=rfp.id, project_id=project_id, items=len(body.items))
    return await _load_rfp(db, rfp.id)


async def list_rfps(
    db: AsyncSession, project_id: int, params: PageParams
) -> tuple[list[Rfp], int]:
    q = select(Rfp).where(Rfp.project_id == project_id)
    count_q = select(func.count(Rfp.id)).where(Rfp.project_id == project_id)
    if params.search:
        pattern = f"%{params.search}%"
        search_filter = or_(Rfp.title.ilike(pattern), Rfp.description.ilike(pattern))
        q = q.where(search_filter)
        count_q = count_q.where(search_filter)

    total = (await db.execute(count_q)).scalar() or 0
    result = await db.execute(
        q.options(*RFP_EXPANSION)
        .order_by(params.order_by(RFP_SORT_COLUMNS), Rfp.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    return list(result.scalars().all()), total


async def get_rfp(db: AsyncSession, rfp_id: int, project_id: int) -> Rfp:
    await _get_scoped_rfp(db, rfp_id, project_id)
    return await _load_rfp(db, rfp_id, RFP_DETAIL_EXPANSION)


async def update_rfp(db: AsyncSession, rfp_id: int, project_id: int, body: RfpUpdate) -> Rfp:
    rfp = await _get_scoped_rfp(db, rfp_id, project_id)
    changes = body.model_dump(exclude_unset=True)
    for key in ("title", "start_date", "end_date", "status", "is_active"):
        # These columns are NOT NULL; an explicit null means "leave unchanged".
        if key in changes and changes[key] is None:
            del changes[key]

    start = changes.get("start_date", rfp.start_date)
    end = changes.get("end_date", rfp.end_date)
    if end < start:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="endDate must be on or after startDate",
        )

    for field, value in changes.items():
        setattr(rfp, field, value)
    await db.flush()
    logger.info("rfp_updated", rfp_id=rfp_id, fields=sorted(changes))
    return await _load_rfp(db, rfp_id)


async def delete_rfp(db: AsyncSession, rfp_id: int, project_id: int) -> None:
    await _get_scoped_rfp(db, rfp_id, project_id)
    await purge_rfps(db, [rfp_id])
    await db.flush()
    logger.info("rfp_deleted", rfp_id=rfp_id, project_id=project_id)


async def toggle_rfp(db: AsyncSession, rfp_id: int, project_id: int, is_active: bool) -> Rfp:
    rfp = await _get_scoped_rfp(db, rfp_id, project_id)
    rfp.is_active = is_active
    await db.flush()
    logger.info("rfp_toggled", rfp_id=rfp_id, is_active=is_active, status=rfp.status)
    return await _load_rfp(db, rfp_id)


async def get_rfp_comparison(db: AsyncSession, project_id: int) -> list[Rfp]:
    result = await db.execute(
        select(Rfp)
        .options(*RFP_COMPARISON_EXPANSION)
        .where(Rfp.project_id == project_id)
        .order_by(Rfp.created_at.desc(), Rfp.id.desc())
    )
    return list(result.scalars().all())


# ---------- supplier side ----------

async def list_active_rfps(db: AsyncSession) -> list[Rfp]:
    result = await db.execute(
        select(Rfp)
        .options(*RFP_PUBLIC_EXPANSION)
        .where(available_for_proposals())
        .order_by(Rfp.created_at.desc(), Rfp.id.desc())
    )
    return list(result.scalars().all())


async def count_active_rfps(db: AsyncSession) -> int:
    return (
        await db.execute(select(func.count(Rfp.id)).where(available_for_proposals()))
    ).scalar() or 0


async def get_rfp_for_supplier(db: AsyncSession, rfp_id: int) -> Rfp:
    """Available RFP by id; unavailable and missing RFPs are indistinguishable."""
    result = await db.execute(
        select(Rfp)
        .options(*RFP_PUBLIC_EXPANSION)
        .where(Rfp.id == rfp_id, available_for_proposals())
    )
    rfp = result.scalar_one_or_none()
    if not rfp:
        raise _not_found("RFP not found or not accessible")
    return rfp


async def get_available_rfp_with_items(db: AsyncSession, rfp_id: int) -> Rfp:
    result = await db.execute(
        select(Rfp)
        .options(selectinload(Rfp.items))
        .where(Rfp.id == rfp_id, available_for_proposals())
    )
    rfp = result.scalar_one_or_none()
    if not rfp:
        raise _not_found("RFP not found or not available for proposals")
    return rfp
