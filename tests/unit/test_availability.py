"""
Tests for the RFP availability predicate in rfp_hub/services/rfp_service.py

An RFP is open for proposals iff status == ACTIVE, is_active, and end_date >= now.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from rfp_hub.database import utcnow
from rfp_hub.models.rfp import Rfp
from rfp_hub.services.rfp_service import available_for_proposals

from conftest import make_product, make_project, make_rfp


@pytest.fixture
async def project(db, customer):
    return await make_project(db, customer)


async def _available_ids(db, now=None):
    result = await db.execute(select(Rfp.id).where(available_for_proposals(now)))
    return set(result.scalars().all())


@pytest.mark.asyncio
async def test_only_active_flagged_unexpired_rfps_are_available(db, project):
    product = await make_product(db, project)
    open_rfp = await make_rfp(db, project, {product: 1}, title="Open")
    await make_rfp(db, project, {product: 1}, status="DRAFT", title="Draft")
    await make_rfp(db, project, {product: 1}, status="CLOSED", title="Closed")
    await make_rfp(db, project, {product: 1}, status="CANCELLED", title="Cancelled")
    await make_rfp(db, project, {product: 1}, is_active=False, title="Switched off")
    await make_rfp(db, project, {product: 1}, ends_in=timedelta(days=-1), title="Expired")

    assert await _available_ids(db) == {open_rfp.id}


@pytest.mark.asyncio
async def test_end_date_boundary_is_inclusive(db, project):
    product = await make_product(db, project)
    rfp = await make_rfp(db, project, {product: 1})

    assert rfp.id in await _available_ids(db, now=rfp.end_date)
    assert rfp.id not in await _available_ids(db, now=rfp.end_date + timedelta(seconds=1))


@pytest.mark.asyncio
async def test_availability_is_evaluated_against_the_given_clock(db, project):
    product = await make_product(db, project)
    rfp = await make_rfp(db, project, {product: 1}, ends_in=timedelta(hours=1))

    assert rfp.id in await _available_ids(db, now=utcnow())
    assert rfp.id not in await _available_ids(db, now=utcnow() + timedelta(hours=2))
