from typing import List

from pydantic import ConfigDict

from rfp_hub.schemas.common import CamelModel
from rfp_hub.schemas.project import ProjectListItem
from rfp_hub.schemas.proposal import ProposalResponse
from rfp_hub.schemas.rfp import RfpResponse


class CustomerDashboard(CamelModel):
    # Both dashboards are served under one union response model; unknown keys
    # must fail so each payload resolves to its own shape.
    model_config = ConfigDict(extra="forbid")

    total_projects: int = 0
    active_projects: int = 0
    total_rfps: int = 0
    active_rfps: int = 0
    total_proposals: int = 0
    pending_proposals: int = 0
    recent_projects: List[ProjectListItem] = []
    recent_rfps: List[RfpResponse] = []
    recent_proposals: List[ProposalResponse] = []


class SupplierDashboard(CamelModel):
    model_config = ConfigDict(extra="forbid")

    total_proposals: int = 0
    pending_proposals: int = 0
    accepted_proposals: int = 0
    rejected_proposals: int = 0
    withdrawn_proposals: int = 0
    available_rfps: int = 0
    recent_proposals: List[ProposalResponse] = []
