from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from rfp_hub.schemas.auth import UserPublic
from rfp_hub.schemas.common import CamelModel, to_naive_utc
from rfp_hub.schemas.project import (
    ProductResponse,
    ProjectSummary,
    ProjectWithCustomer,
    ProjectListItem,
)

RfpStatus = Literal["DRAFT", "ACTIVE", "CLOSED", "CANCELLED"]

MAX_ITEM_QUANTITY = 1_000_000


# ---------- requests ----------

class RfpItemCreate(CamelModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=1, le=MAX_ITEM_QUANTITY)
    notes: Optional[str] = Field(None, max_length=200)


class _RfpDates(CamelModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def _check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self


class RfpCreate(_RfpDates):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    start_date: datetime
    end_date: datetime
    items: List[RfpItemCreate] = Field(..., min_length=1)


class RfpUpdate(_RfpDates):
    title: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[RfpStatus] = None
    is_active: Optional[bool] = None


class RfpToggle(CamelModel):
    is_active: bool


# ---------- responses ----------

class RfpItemResponse(CamelModel):
    id: int
    rfp_id: int
    product_id: int
    quantity: int
    notes: Optional[str] = None
    product: ProductResponse


class ProposalSummary(CamelModel):
    id: int
    supplier_id: int
    rfp_id: int
    status: str
    total_amount: float
    notes: Optional[str] = None
    submitted_at: datetime
    created_at: datetime
    updated_at: datetime


class ProposalItemResponse(CamelModel):
    id: int
    proposal_id: int
    rfp_item_id: int
    unit_price: float
    total_price: float
    notes: Optional[str] = None
    rfp_item: RfpItemResponse


class ProposalWithItems(ProposalSummary):
    supplier: UserPublic
    items: List[ProposalItemResponse] = []


class RfpSummary(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    status: str
    is_active: bool
    start_date: datetime
    end_date: datetime
    project_id: int
    created_at: datetime
    updated_at: datetime


class RfpWithProject(RfpSummary):
    project: ProjectSummary


class RfpResponse(RfpWithProject):
    items: List[RfpItemResponse] = []
    proposals: List[ProposalSummary] = []


class RfpDetailResponse(RfpWithProject):
    items: List[RfpItemResponse] = []
    proposals: List[ProposalWithItems] = []


class RfpComparisonResponse(RfpSummary):
    items: List[RfpItemResponse] = []
    proposals: List[ProposalWithItems] = []


class PublicRfpResponse(RfpSummary):
    """Supplier-facing view: competitors' proposals are reduced to a count."""

    project: ProjectWithCustomer
    items: List[RfpItemResponse] = []
    proposal_count: int = 0


class ProjectRfp(RfpSummary):
    items: List[RfpItemResponse] = []
    proposals: List[ProposalSummary] = []


class ProjectDetailResponse(ProjectListItem):
    rfps: List[ProjectRfp] = []
