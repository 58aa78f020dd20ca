from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from rfp_hub.schemas.common import CamelModel
from rfp_hub.schemas.rfp import ProposalWithItems, RfpWithProject

ProposalStatus = Literal["PENDING", "ACCEPTED", "REJECTED", "WITHDRAWN"]
CustomerDecision = Literal["ACCEPTED", "REJECTED"]


class ProposalItemCreate(CamelModel):
    rfp_item_id: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = Field(None, max_length=200)


class ProposalCreate(CamelModel):
    rfp_id: int = Field(..., gt=0)
    items: List[ProposalItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=500)


class ProposalUpdate(CamelModel):
    items: Optional[List[ProposalItemCreate]] = Field(None, min_length=1)
    notes: Optional[str] = Field(None, max_length=500)


class ProposalDecision(CamelModel):
    status: CustomerDecision


class ProposalStatusUpdate(CamelModel):
    status: ProposalStatus


class ProposalResponse(ProposalWithItems):
    rfp: RfpWithProject
