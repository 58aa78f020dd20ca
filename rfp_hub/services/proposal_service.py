"""
Proposal lifecycle: submission, revision, withdrawal and customer decisions.

State machine:
  PENDING --(supplier withdraw)--> WITHDRAWN
  PENDING --(customer decision)--> ACCEPTED | REJECTED
  any     --(admin override)-----> any

Only PENDING proposals can be revised or withdrawn by their supplier. A supplier
holds at most one proposal per RFP, whatever its status.
"""

from typing import Optional

from fastapi import HTTPException, status as http_status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from rfp_hub.database import utcnow
from rfp_hub.models.project import Project
from rfp_hub.models.proposal import Proposal, ProposalItem
from rfp_hub.models.rfp import Rfp, RfpItem
from rfp_hub.schemas.common import PageParams
from rfp_hub.schemas.proposal import ProposalCreate, ProposalUpdate
from rfp_hub.services.pricing import PricedProposal, ensure_complete, price_complete_submission, price_items
from rfp_hub.services.rfp_service import get_available_rfp_with_items

logger = structlog.get_logger()

PROPOSAL_SORT_COLUMNS = {
    "createdAt": Proposal.created_at,
    "submittedAt": Proposal.submitted_at,
    "updatedAt": Proposal.updated_at,
    "totalAmount": Proposal.total_amount,
    "status": Proposal.status,
}

PROPOSAL_EXPANSION = (
    selectinload(Proposal.supplier),
    selectinload(Proposal.rfp).selectinload(Rfp.project),
    selectinload(Proposal.items)
    .selectinload(ProposalItem.rfp_item)
    .selectinload(RfpItem.product),
)

CANNOT_UPDATE = "Proposal not found or cannot be updated"
CANNOT_WITHDRAW = "Proposal not found or cannot be withdrawn"


def _not_found(message: str = "Proposal not found") -> HTTPException:
    return HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail=message)


def _owned_by_customer(q, customer_id: Optional[int]):
    """Restrict a proposal query to RFPs under the customer's projects."""
    if customer_id is None:
        return q
    return (
        q.join(Rfp, Rfp.id == Proposal.rfp_id)
        .join(Project, Project.id == Rfp.project_id)
        .where(Project.customer_id == customer_id)
    )


async def load_proposal(db: AsyncSession, proposal_id: int) -> Proposal:
    result = await db.execute(
        select(Proposal)
        .options(*PROPOSAL_EXPANSION)
        .where(Proposal.id == proposal_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


def _build_items(priced: PricedProposal) -> list[ProposalItem]:
    return [
        ProposalItem(
            rfp_item_id=line.rfp_item_id,
            unit_price=line.unit_price,
            total_price=line.total_price,
            notes=line.notes,
        )
        for line in priced.lines
    ]


# ---------- supplier side ----------

DUPLICATE_MARKERS = (
    "uq_proposal_supplier_rfp",
    "proposals.supplier_id, proposals.rfp_id",
)


def _is_duplicate_submission(exc: IntegrityError) -> bool:
    """True when the violation is the one-proposal-per-supplier-per-RFP key.

    PostgreSQL reports the constraint name, SQLite the column list.
    """
    message = str(exc.orig)
    return any(marker in message for marker in DUPLICATE_MARKERS)


async def _already_proposed(db: AsyncSession, supplier_id: int, rfp_id: int) -> bool:
    existing = (
        await db.execute(
            select(Proposal.id).where(
                Proposal.supplier_id == supplier_id, Proposal.rfp_id == rfp_id
            )
        )
    ).scalar_one_or_none()
    return existing is not None


async def create_proposal(db: AsyncSession, supplier_id: int, body: ProposalCreate) -> Proposal:
    rfp = await get_available_rfp_with_items(db, body.rfp_id)
    ensure_complete(rfp.items, body.items)

    if await _already_proposed(db, supplier_id, rfp.id):
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="You have already submitted a proposal for this RFP",
        )

    priced = price_items(rfp.items, body.items)
    now = utcnow()
    proposal = Proposal(
        supplier_id=supplier_id,
        rfp_id=rfp.id,
        status="PENDING",
        total_amount=priced.total_amount,
        notes=body.notes,
        submitted_at=now,
        items=_build_items(priced),
    )
    db.add(proposal)
    try:
        await db.flush()
    except IntegrityError as exc:
        if not _is_duplicate_submission(exc):
            raise
        # Lost a race with a concurrent submission for the same RFP.
        logger.warning("proposal_duplicate_race", supplier_id=supplier_id, rfp_id=rfp.id)
        raise HTTPException(
            status_code=http_status.HTTP_409_CONFLICT,
            detail="You have already submitted a proposal for this RFP",
        )

    logger.info(
        "proposal_created",
        proposal_id=proposal.id,
        rfp_id=rfp.id,
        supplier_id=supplier_id,
        total_amount=str(priced.total_amount),
    )
    return await load_proposal(db, proposal.id)


async def list_supplier_proposals(
    db: AsyncSession, supplier_id: Optional[int], params: PageParams
) -> tuple[list[Proposal], int]:
    q = select(Proposal)
    count_q = select(func.count(Proposal.id))
    if supplier_id is not None:
        q = q.where(Proposal.supplier_id == supplier_id)
        count_q = count_q.where(Proposal.supplier_id == supplier_id)
    if params.search:
        pattern = f"%{params.search}%"
        search_filter = or_(Rfp.title.ilike(pattern), Proposal.notes.ilike(pattern))
        q = q.join(Rfp, Rfp.id == Proposal.rfp_id).where(search_filter)
        count_q = count_q.join(Rfp, Rfp.id == Proposal.rfp_id).where(search_filter)

    total = (await db.execute(count_q)).scalar() or 0
    result = await db.execute(
        q.options(*PROPOSAL_EXPANSION)
        .order_by(params.order_by(PROPOSAL_SORT_COLUMNS), Proposal.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    return list(result.scalars().all()), total


async def get_supplier_proposal(
    db: AsyncSession, proposal_id: int, supplier_id: Optional[int]
) -> Proposal:
    q = select(Proposal.id).where(Proposal.id == proposal_id)
    if supplier_id is not None:
        q = q.where(Proposal.supplier_id == supplier_id)
    if (await db.execute(q)).scalar_one_or_none() is None:
        raise _not_found()
    return await load_proposal(db, proposal_id)


async def _get_pending_owned(
    db: AsyncSession, proposal_id: int, supplier_id: int, message: str
) -> Proposal:
    result = await db.execute(
        select(Proposal).where(
            Proposal.id == proposal_id,
            Proposal.supplier_id == supplier_id,
            Proposal.status == "PENDING",
        )
    )
    proposal = result.scalar_one_or_none()
    if not proposal:
        raise _not_found(message)
    return proposal


async def update_proposal(
    db: AsyncSession, proposal_id: int, supplier_id: int, body: ProposalUpdate
) -> Proposal:
    """Revise notes and/or the full item set of a pending proposal.

    New items are priced against the RFP's current item set and replace the
    old collection wholesale.
    """
    proposal = await _get_pending_owned(db, proposal_id, supplier_id, CANNOT_UPDATE)

    if "notes" in body.model_fields_set:
        proposal.notes = body.notes

    if body.items is not None:
        rfp_items = (
            await db.execute(select(RfpItem).where(RfpItem.rfp_id == proposal.rfp_id))
        ).scalars().all()
        priced = price_complete_submission(rfp_items, body.items)

        await db.execute(delete(ProposalItem).where(ProposalItem.proposal_id == proposal.id))
        for item in _build_items(priced):
            item.proposal_id = proposal.id
            db.add(item)
        proposal.total_amount = priced.total_amount

    await db.flush()
    logger.info(
        "proposal_updated",
        proposal_id=proposal_id,
        items_replaced=body.items is not None,
        total_amount=str(proposal.total_amount),
    )
    return await load_proposal(db, proposal_id)


async def withdraw_proposal(db: AsyncSession, proposal_id: int, supplier_id: int) -> None:
    proposal = await _get_pending_owned(db, proposal_id, supplier_id, CANNOT_WITHDRAW)
    proposal.status = "WITHDRAWN"
    await db.flush()
    logger.info("proposal_withdrawn", proposal_id=proposal_id, supplier_id=supplier_id)


# ---------- customer side ----------

async def get_customer_proposal(
    db: AsyncSession, proposal_id: int, customer_id: Optional[int]
) -> Proposal:
    q = _owned_by_customer(select(Proposal.id).where(Proposal.id == proposal_id), customer_id)
    if (await db.execute(q)).scalar_one_or_none() is None:
        raise _not_found()
    return await load_proposal(db, proposal_id)


async def decide_proposal(
    db: AsyncSession, proposal_id: int, customer_id: Optional[int], decision: str
) -> Proposal:
    """Accept or reject a pending proposal; sibling proposals are left untouched."""
    q = _owned_by_customer(
        select(Proposal).where(Proposal.id == proposal_id, Proposal.status == "PENDING"),
        customer_id,
    )
    proposal = (await db.execute(q)).scalar_one_or_none()
    if not proposal:
        raise _not_found(CANNOT_UPDATE)

    proposal.status = decision
    await db.flush()
    logger.info("proposal_decided", proposal_id=proposal_id, status=decision)
    return await load_proposal(db, proposal_id)


async def list_proposals_for_rfp(
    db: AsyncSession, rfp_id: int, customer_id: Optional[int]
) -> list[Proposal]:
    rfp_q = select(Rfp.id).where(Rfp.id == rfp_id)
    if customer_id is not None:
        rfp_q = rfp_q.join(Project, Project.id == Rfp.project_id).where(
            Project.customer_id == customer_id
        )
    if (await db.execute(rfp_q)).scalar_one_or_none() is None:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="RFP not found")

    result = await db.execute(
        select(Proposal)
        .options(*PROPOSAL_EXPANSION)
        .where(Proposal.rfp_id == rfp_id)
        .order_by(Proposal.submitted_at.desc(), Proposal.id.desc())
    )
    return list(result.scalars().all())


# ---------- administration ----------

async def set_proposal_status(db: AsyncSession, proposal_id: int, new_status: str) -> Proposal:
    proposal = await db.get(Proposal, proposal_id)
    if not proposal:
        raise _not_found()
    previous = proposal.status
    proposal.status = new_status
    await db.flush()
    logger.info(
        "proposal_status_overridden",
        proposal_id=proposal_id,
        from_status=previous,
        to_status=new_status,
    )
    return await load_proposal(db, proposal_id)
