"""
Proposal pricing. Reconciles submitted lines with an RFP's item set.

Every proposal must quote each RFP item exactly once:
  total_price  = unit_price x rfp_item.quantity
  total_amount = sum of total_price over all lines

Both amounts are stored as NUMERIC(14, 2), so neither may exceed MAX_AMOUNT.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Protocol, Sequence

from fastapi import HTTPException, status as http_status

CENTS = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999999.99")
AMOUNT_TOO_LARGE = "Proposal amount exceeds the supported maximum"


class RfpItemLike(Protocol):
    id: int
    quantity: int


class SubmittedLine(Protocol):
    rfp_item_id: int
    unit_price: Decimal
    notes: Optional[str]


@dataclass
class PricedLine:
    rfp_item_id: int
    unit_price: Decimal
    total_price: Decimal
    notes: Optional[str] = None


@dataclass
class PricedProposal:
    lines: list[PricedLine]
    total_amount: Decimal


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=message)


def ensure_complete(
    rfp_items: Iterable[RfpItemLike], submitted: Sequence[SubmittedLine]
) -> None:
    """Reject a submission that leaves any RFP item unquoted."""
    submitted_ids = {line.rfp_item_id for line in submitted}
    missing = [item.id for item in rfp_items if item.id not in submitted_ids]
    if missing:
        raise _bad_request("All RFP items must be included in the proposal")


def price_items(
    rfp_items: Iterable[RfpItemLike], submitted: Sequence[SubmittedLine]
) -> PricedProposal:
    """Resolve each submitted line against the RFP items and price it.

    Any unknown or repeated item id aborts the whole submission.
    """
    by_id = {item.id: item for item in rfp_items}
    seen: set[int] = set()
    lines: list[PricedLine] = []
    total_amount = Decimal("0")

    for line in submitted:
        rfp_item = by_id.get(line.rfp_item_id)
        if rfp_item is None:
            raise _bad_request("Invalid RFP item")
        if line.rfp_item_id in seen:
            raise _bad_request("Duplicate RFP item in proposal")
        seen.add(line.rfp_item_id)

        unit_price = Decimal(line.unit_price)
        if unit_price <= 0:
            raise _bad_request("Unit price must be positive")

        total_price = (unit_price * rfp_item.quantity).quantize(CENTS, rounding=ROUND_HALF_UP)
        total_amount += total_price
        if total_price > MAX_AMOUNT or total_amount > MAX_AMOUNT:
            raise _bad_request(AMOUNT_TOO_LARGE)
        lines.append(
            PricedLine(
                rfp_item_id=line.rfp_item_id,
                unit_price=unit_price,
                total_price=total_price,
                notes=line.notes,
            )
        )

    return PricedProposal(lines=lines, total_amount=total_amount.quantize(CENTS))


def price_complete_submission(
    rfp_items: Sequence[RfpItemLike], submitted: Sequence[SubmittedLine]
) -> PricedProposal:
    ensure_complete(rfp_items, submitted)
    return price_items(rfp_items, submitted)
