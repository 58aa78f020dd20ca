"""Read-only rollups for the customer and supplier dashboards."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rfp_hub.models.project import Project
from rfp_hub.models.proposal import Proposal
from rfp_hub.models.rfp import Rfp
from rfp_hub.schemas.dashboard import CustomerDashboard, SupplierDashboard
from rfp_hub.schemas.project import ProjectListItem
from rfp_hub.schemas.proposal import ProposalResponse
from rfp_hub.schemas.rfp import RfpResponse
from rfp_hub.services.project_service import PROJECT_LIST_EXPANSION
from rfp_hub.services.proposal_service import PROPOSAL_EXPANSION
from rfp_hub.services.rfp_service import RFP_EXPANSION, count_active_rfps

RECENT_LIMIT = 5


async def _count(db: AsyncSession, q) -> int:
    return (await db.execute(q)).scalar() or 0


async def customer_dashboard(db: AsyncSession, customer_id: Optional[int]) -> CustomerDashboard:
    """Counts and recent activity across the customer's projects (all projects for admins)."""
    projects_q = select(Project)
    project_count_q = select(func.count(Project.id))
    rfps_q = select(Rfp).join(Project, Project.id == Rfp.project_id)
    rfp_count_q = select(func.count(Rfp.id)).join(Project, Project.id == Rfp.project_id)
    proposals_q = (
        select(Proposal)
        .join(Rfp, Rfp.id == Proposal.rfp_id)
        .join(Project, Project.id == Rfp.project_id)
    )
    proposal_count_q = (
        select(func.count(Proposal.id))
        .join(Rfp, Rfp.id == Proposal.rfp_id)
        .join(Project, Project.id == Rfp.project_id)
    )
    if customer_id is not None:
        owned = Project.customer_id == customer_id
        projects_q = projects_q.where(owned)
        project_count_q = project_count_q.where(owned)
        rfps_q = rfps_q.where(owned)
        rfp_count_q = rfp_count_q.where(owned)
        proposals_q = proposals_q.where(owned)
        proposal_count_q = proposal_count_q.where(owned)

    recent_projects = (
        await db.execute(
            projects_q.options(*PROJECT_LIST_EXPANSION)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .limit(RECENT_LIMIT)
        )
    ).scalars().all()
    recent_rfps = (
        await db.execute(
            rfps_q.options(*RFP_EXPANSION)
            .order_by(Rfp.created_at.desc(), Rfp.id.desc())
            .limit(RECENT_LIMIT)
        )
    ).scalars().all()
    recent_proposals = (
        await db.execute(
            proposals_q.options(*PROPOSAL_EXPANSION)
            .order_by(Proposal.submitted_at.desc(), Proposal.id.desc())
            .limit(RECENT_LIMIT)
        )
    ).scalars().all()

    return CustomerDashboard(
        total_projects=await _count(db, project_count_q),
        active_projects=await _count(db, project_count_q.where(Project.status == "ACTIVE")),
        total_rfps=await _count(db, rfp_count_q),
        active_rfps=await _count(db, rfp_count_q.where(Rfp.status == "ACTIVE")),
        total_proposals=await _count(db, proposal_count_q),
        pending_proposals=await _count(db, proposal_count_q.where(Proposal.status == "PENDING")),
        recent_projects=[ProjectListItem.model_validate(p) for p in recent_projects],
        recent_rfps=[RfpResponse.model_validate(r) for r in recent_rfps],
        recent_proposals=[ProposalResponse.model_validate(p) for p in recent_proposals],
    )


async def supplier_dashboard(db: AsyncSession, supplier_id: int) -> SupplierDashboard:
    by_status = dict(
        (
            await db.execute(
                select(Proposal.status, func.count(Proposal.id))
                .where(Proposal.supplier_id == supplier_id)
                .group_by(Proposal.status)
            )
        ).all()
    )
    recent_proposals = (
        await db.execute(
            select(Proposal)
            .options(*PROPOSAL_EXPANSION)
            .where(Proposal.supplier_id == supplier_id)
            .order_by(Proposal.submitted_at.desc(), Proposal.id.desc())
            .limit(RECENT_LIMIT)
        )
    ).scalars().all()

    return SupplierDashboard(
        total_proposals=sum(by_status.values()),
        pending_proposals=by_status.get("PENDING", 0),
        accepted_proposals=by_status.get("ACCEPTED", 0),
        rejected_proposals=by_status.get("REJECTED", 0),
        withdrawn_proposals=by_status.get("WITHDRAWN", 0),
        available_rfps=await count_active_rfps(db),
        recent_proposals=[ProposalResponse.model_validate(p) for p in recent_proposals],
    )
