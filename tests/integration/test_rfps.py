"""
RFP lifecycle through the HTTP API: creation, updates, toggling, deletion and
what suppliers can see.
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from rfp_hub.database import utcnow
from rfp_hub.models.proposal import Proposal, ProposalItem
from rfp_hub.models.rfp import Rfp, RfpItem

from conftest import auth_headers, make_product, make_project, make_rfp, rfp_item_ids


@pytest.fixture
async def project(db, customer):
    return await make_project(db, customer)


@pytest.fixture
async def laptop(db, project):
    return await make_product(db, project, "Laptop", "HARDWARE")


def _rfp_body(product_ids, **overrides):
    now = utcnow()
    body = {
        "title": "Workstation bundle",
        "description": "Laptops for the new hires",
        "startDate": now.isoformat(),
        "endDate": (now + timedelta(days=30)).isoformat(),
        "items": [{"productId": pid, "quantity": 5, "notes": "14in"} for pid in product_ids],
    }
    body.update(overrides)
    return body


async def _count(db, model) -> int:
    return (await db.execute(select(func.count(model.id)))).scalar()


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_rfp_is_active_with_items(client, project, laptop, customer):
    resp = await client.post(
        f"/api/projects/{project.id}/rfps",
        json=_rfp_body([laptop.id]),
        headers=auth_headers(customer),
    )

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["status"] == "ACTIVE"
    assert data["isActive"] is True
    assert data["projectId"] == project.id
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 5
    assert data["items"][0]["product"]["name"] == "Laptop"


@pytest.mark.asyncio
async def test_create_with_foreign_product_persists_nothing(
    client, db, project, laptop, customer, other_customer
):
    other_project = await make_project(db, other_customer, "Someone else's")
    foreign = await make_product(db, other_project, "Printer", "HARDWARE")

    resp = await client.post(
        f"/api/projects/{project.id}/rfps",
        json=_rfp_body([laptop.id, foreign.id]),
        headers=auth_headers(customer),
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "Some products do not belong to this project"
    assert await _count(db, Rfp) == 0
    assert await _count(db, RfpItem) == 0


@pytest.mark.asyncio
async def test_create_rejects_end_before_start(client, project, laptop, customer):
    now = utcnow()
    resp = await client.post(
        f"/api/projects/{project.id}/rfps",
        json=_rfp_body(
            [laptop.id],
            startDate=now.isoformat(),
            endDate=(now - timedelta(days=1)).isoformat(),
        ),
        headers=auth_headers(customer),
    )

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"


@pytest.mark.asyncio
async def test_create_requires_items_and_positive_quantity(client, project, laptop, customer):
    no_items = await client.post(
        f"/api/projects/{project.id}/rfps",
        json=_rfp_body([], items=[]),
        headers=auth_headers(customer),
    )
    zero_qty = await client.post(
        f"/api/projects/{project.id}/rfps",
        json=_rfp_body([], items=[{"productId": laptop.id, "quantity": 0}]),
        headers=auth_headers(customer),
    )

    assert no_items.status_code == 400
    assert zero_qty.status_code == 400


@pytest.mark.asyncio
async def test_create_rejects_quantity_beyond_cap(client, db, project, laptop, customer):
    resp = await client.post(
        f"/api/projects/{project.id}/rfps",
        json=_rfp_body([], items=[{"productId": laptop.id, "quantity": 3_000_000_000}]),
        headers=auth_headers(customer),
    )

    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"
    assert "quantity" in resp.json()["error"]
    assert await _count(db, Rfp) == 0


@pytest.mark.asyncio
async def test_create_on_foreign_project_not_found(client, project, laptop, other_customer):
    resp = await client.post(
        f"/api/projects/{project.id}/rfps",
        json=_rfp_body([laptop.id]),
        headers=auth_headers(other_customer),
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "Project not found"


@pytest.mark.asyncio
async def test_suppliers_cannot_manage_rfps(client, project, laptop, supplier):
    resp = await client.post(
        f"/api/projects/{project.id}/rfps",
        json=_rfp_body([laptop.id]),
        headers=auth_headers(supplier),
    )
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# List / get / update / toggle / delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_rfps_searches_title(client, db, project, laptop, customer):
    await make_rfp(db, project, {laptop: 1}, title="Laptops for sales")
    await make_rfp(db, project, {laptop: 1}, title="Office chairs")

    resp = await client.get(
        f"/api/projects/{project.id}/rfps?search=laptop", headers=auth_headers(customer)
    )

    assert resp.status_code == 200
    assert [r["title"] for r in resp.json()["data"]] == ["Laptops for sales"]
    assert resp.json()["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_list_rejects_unknown_sort_column(client, project, customer):
    resp = await client.get(
        f"/api/projects/{project.id}/rfps?sortBy=passwordHash", headers=auth_headers(customer)
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_fields_without_touching_items(client, db, project, laptop, customer):
    rfp = await make_rfp(db, project, {laptop: 4})

    resp = await client.put(
        f"/api/projects/{project.id}/rfps/{rfp.id}",
        json={"title": "Renamed bundle", "status": "CLOSED"},
        headers=auth_headers(customer),
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["title"] == "Renamed bundle"
    assert data["status"] == "CLOSED"
    assert data["isActive"] is True
    assert [i["quantity"] for i in data["items"]] == [4]


@pytest.mark.asyncio
async def test_update_end_date_before_stored_start_rejected(client, db, project, laptop, customer):
    rfp = await make_rfp(db, project, {laptop: 1})

    resp = await client.put(
        f"/api/projects/{project.id}/rfps/{rfp.id}",
        json={"endDate": (rfp.start_date - timedelta(days=2)).isoformat()},
        headers=auth_headers(customer),
    )

    assert resp.status_code == 400
    assert resp.json()["message"] == "endDate must be on or after startDate"


@pytest.mark.asyncio
async def test_toggle_only_flips_the_flag(client, db, project, laptop, customer):
    rfp = await make_rfp(db, project, {laptop: 1}, status="DRAFT")

    off = await client.put(
        f"/api/projects/{project.id}/rfps/{rfp.id}/toggle",
        json={"isActive": False},
        headers=auth_headers(customer),
    )
    on = await client.put(
        f"/api/projects/{project.id}/rfps/{rfp.id}/toggle",
        json={"isActive": True},
        headers=auth_headers(customer),
    )

    assert off.json()["data"]["isActive"] is False
    assert off.json()["message"] == "RFP deactivated successfully"
    assert on.json()["data"]["isActive"] is True
    assert on.json()["data"]["status"] == "DRAFT"


@pytest.mark.asyncio
async def test_rfp_scoped_to_its_project(client, db, project, laptop, customer):
    rfp = await make_rfp(db, project, {laptop: 1})
    other = await make_project(db, customer, "Second project")

    resp = await client.get(
        f"/api/projects/{other.id}/rfps/{rfp.id}", headers=auth_headers(customer)
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "RFP not found"


@pytest.mark.asyncio
async def test_delete_removes_items_and_proposals(
    client, db, project, laptop, customer, supplier
):
    rfp = await make_rfp(db, project, {laptop: 2})
    (item,) = await rfp_item_ids(db, rfp)
    created = await client.post(
        "/api/proposals",
        json={"rfpId": rfp.id, "items": [{"rfpItemId": item, "unitPrice": 10}]},
        headers=auth_headers(supplier),
    )
    assert created.status_code == 201

    resp = await client.delete(
        f"/api/projects/{project.id}/rfps/{rfp.id}", headers=auth_headers(customer)
    )

    assert resp.status_code == 200
    assert await _count(db, Rfp) == 0
    assert await _count(db, RfpItem) == 0
    assert await _count(db, Proposal) == 0
    assert await _count(db, ProposalItem) == 0


@pytest.mark.asyncio
async def test_comparison_includes_full_proposals(client, db, project, laptop, customer, supplier):
    rfp = await make_rfp(db, project, {laptop: 3})
    (item,) = await rfp_item_ids(db, rfp)
    await client.post(
        "/api/proposals",
        json={"rfpId": rfp.id, "items": [{"rfpItemId": item, "unitPrice": 7}]},
        headers=auth_headers(supplier),
    )

    resp = await client.get(
        f"/api/projects/{project.id}/rfps/comparison", headers=auth_headers(customer)
    )

    assert resp.status_code == 200
    (entry,) = resp.json()["data"]
    (proposal,) = entry["proposals"]
    assert proposal["totalAmount"] == 21.0
    assert proposal["supplier"]["email"] == "supplier@globex.com"
    assert proposal["items"][0]["rfpItem"]["product"]["name"] == "Laptop"


# ---------------------------------------------------------------------------
# Supplier visibility
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_active_listing_hides_unavailable_rfps(client, db, project, laptop):
    open_rfp = await make_rfp(db, project, {laptop: 1}, title="Open")
    await make_rfp(db, project, {laptop: 1}, ends_in=timedelta(days=-1), title="Expired")
    await make_rfp(db, project, {laptop: 1}, is_active=False, title="Paused")
    await make_rfp(db, project, {laptop: 1}, status="DRAFT", title="Draft")

    resp = await client.get("/api/rfps/active")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [r["id"] for r in data] == [open_rfp.id]
    assert data[0]["project"]["customer"]["email"] == "customer@acme.com"
    assert "passwordHash" not in data[0]["project"]["customer"]


@pytest.mark.asyncio
async def test_active_listing_newest_first(client, db, project, laptop):
    older = await make_rfp(db, project, {laptop: 1}, title="Older")
    newer = await make_rfp(db, project, {laptop: 1}, title="Newer")

    resp = await client.get("/api/rfps/active")

    assert [r["id"] for r in resp.json()["data"]] == [newer.id, older.id]


@pytest.mark.asyncio
async def test_expired_rfp_hidden_from_supplier_detail(client, db, project, laptop):
    expired = await make_rfp(db, project, {laptop: 1}, ends_in=timedelta(hours=-1))

    resp = await client.get(f"/api/rfps/{expired.id}")
    missing = await client.get("/api/rfps/999999")

    assert resp.status_code == 404
    assert resp.json()["message"] == "RFP not found or not accessible"
    assert missing.json() == resp.json()


@pytest.mark.asyncio
async def test_supplier_detail_shows_count_not_competitor_bids(
    client, db, project, laptop, supplier, other_supplier
):
    rfp = await make_rfp(db, project, {laptop: 1})
    (item,) = await rfp_item_ids(db, rfp)
    for who, price in ((supplier, 10), (other_supplier, 12)):
        await client.post(
            "/api/proposals",
            json={"rfpId": rfp.id, "items": [{"rfpItemId": item, "unitPrice": price}]},
            headers=auth_headers(who),
        )

    resp = await client.get(f"/api/rfps/{rfp.id}")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["proposalCount"] == 2
    assert "proposals" not in data
    assert data["items"][0]["id"] == item


@pytest.mark.asyncio
async def test_toggling_off_hides_rfp_from_suppliers(client, db, project, laptop, customer):
    rfp = await make_rfp(db, project, {laptop: 1})
    await client.put(
        f"/api/projects/{project.id}/rfps/{rfp.id}/toggle",
        json={"isActive": False},
        headers=auth_headers(customer),
    )

    resp = await client.get(f"/api/rfps/{rfp.id}")

    assert resp.status_code == 404
