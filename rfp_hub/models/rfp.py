from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    String,
    Boolean,
    Integer,
    DateTime,
    Text,
    ForeignKey,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rfp_hub.database import Base, utcnow
from rfp_hub.models.project import Project, Product

if TYPE_CHECKING:
    from rfp_hub.models.proposal import Proposal

RFP_STATUSES = ("DRAFT", "ACTIVE", "CLOSED", "CANCELLED")


class Rfp(Base):
    __tablename__ = "rfps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default="DRAFT", nullable=False)
    # Independent of status; both gate availability.
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    project: Mapped[Project] = relationship(back_populates="rfps")
    items: Mapped[list["RfpItem"]] = relationship(
        back_populates="rfp", order_by="RfpItem.id"
    )
    proposals: Mapped[list["Proposal"]] = relationship(
        back_populates="rfp", order_by="Proposal.submitted_at.desc()"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('DRAFT','ACTIVE','CLOSED','CANCELLED')",
            name="chk_rfp_status",
        ),
        CheckConstraint("end_date >= start_date", name="chk_rfp_dates"),
        Index("idx_rfps_project", "project_id"),
        Index("idx_rfps_availability", "status", "is_active", "end_date"),
    )


class RfpItem(Base):
    __tablename__ = "rfp_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rfp_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rfps.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    rfp: Mapped[Rfp] = relationship(back_populates="items")
    product: Mapped[Product] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_rfp_item_qty"),
        Index("idx_rfp_items_rfp", "rfp_id"),
    )
