"""Test billing service."""

from __future__ import annotations

from datetime import date

import pytest

from hotelops.errors import ValidationError


@pytest.mark.asyncio
async def test_invoice_numbers_are_sequential_per_day(services, prop):
    first = await services.billings.create({"property_id": prop["id"], "amount": "100.00"})
    second = await services.billings.create({"property_id": prop["id"], "amount": "50.00"})
    assert first["invoice_number"] == "GRH261019001"
    assert second["invoice_number"] == "GRH261019002"
    assert first["billing_date"] == date(2026, 10, 19)
    assert first["status"] == "draft"


@pytest.mark.asyncio
async def test_property_without_code_uses_name_prefix(services):
    prop = await services.properties.create({"name": "Seaside Inn"})
    billing = await services.billings.create({"property_id": prop["id"], "amount": "10"})
    assert billing["invoice_number"].startswith("SEA261019")


@pytest.mark.asyncio
async def test_properties_sharing_a_prefix_get_distinct_invoice_numbers(services):
    seaside = await services.properties.create({"name": "Seaside Inn"})
    seaview = await services.properties.create({"name": "Seaview Hotel"})
    first = await services.billings.create({"property_id": seaside["id"], "amount": "10"})
    second = await services.billings.create({"property_id": seaview["id"], "amount": "20"})
    third = await services.billings.create({"property_id": seaside["id"], "amount": "30"})
    assert [b["invoice_number"] for b in (first, second, third)] == [
        "SEA261019001",
        "SEA261019002",
        "SEA261019003",
    ]


@pytest.mark.asyncio
async def test_deleted_invoice_numbers_are_not_reissued(services, prop):
    first = await services.billings.create({"property_id": prop["id"], "amount": "100.00"})
    await services.billings.create({"property_id": prop["id"], "amount": "50.00"})
    await services.billings.delete_by_id(first["id"])

    third = await services.billings.create({"property_id": prop["id"], "amount": "75.00"})
    assert third["invoice_number"] == "GRH261019003"


@pytest.mark.asyncio
async def test_mark_paid(services, prop):
    billing = await services.billings.create({"property_id": prop["id"], "amount": "100.00"})
    paid = await services.billings.mark_paid(
        billing["id"], payment_method="card", payment_reference="ch_123"
    )
    assert paid["status"] == "paid"
    assert paid["payment_date"] == date(2026, 10, 19)
    assert paid["payment_method"] == "card"


@pytest.mark.asyncio
async def test_negative_amount_rejected(services, prop):
    with pytest.raises(ValidationError):
        await services.billings.create({"property_id": prop["id"], "amount": "-1"})
