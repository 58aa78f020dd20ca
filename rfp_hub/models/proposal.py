from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    String,
    Integer,
    Numeric,
    DateTime,
    Text,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rfp_hub.database import Base, utcnow
from rfp_hub.models.user import User
from rfp_hub.models.rfp import Rfp, RfpItem

PROPOSAL_STATUSES = ("PENDING", "ACCEPTED", "REJECTED", "WITHDRAWN")


class Proposal(Base):
    __tablename__ = "proposals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    supplier_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    rfp_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rfps.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), default="PENDING", nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    supplier: Mapped[User] = relationship()
    rfp: Mapped[Rfp] = relationship(back_populates="proposals")
    items: Mapped[list["ProposalItem"]] = relationship(
        back_populates="proposal", order_by="ProposalItem.id"
    )

    __table_args__ = (
        UniqueConstraint("supplier_id", "rfp_id", name="uq_proposal_supplier_rfp"),
        CheckConstraint(
            "status IN ('PENDING','ACCEPTED','REJECTED','WITHDRAWN')",
            name="chk_proposal_status",
        ),
        Index("idx_proposals_rfp", "rfp_id"),
    )


class ProposalItem(Base):
    __tablename__ = "proposal_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    proposal_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False
    )
    rfp_item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rfp_items.id", ondelete="CASCADE"), nullable=False
    )
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    proposal: Mapped[Proposal] = relationship(back_populates="items")
    rfp_item: Mapped[RfpItem] = relationship()

    __table_args__ = (
        CheckConstraint("unit_price > 0", name="chk_proposal_item_price"),
        Index("idx_proposal_items_proposal", "proposal_id"),
    )
