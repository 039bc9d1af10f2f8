from decimal import Decimal
import pytest
from metapay.fees.constants import DEFAULT_CUSTOMER_FEE, DEFAULT_SELLER_FEE, FeeRole
from metapay.fees.repository import get_fee_config, pick_fee_rate, resolve_fee_rate, upsert_fee_config
from metapay.fees.utils import deduction, quantize_usd, surcharge
from tests.factories import fetch_seller, seed_fee_config, seed_seller

url_prefix="/api/v1"


def test_surcharge_is_plain_percentage():
    assert surcharge(100, 15) == Decimal("15")
    assert surcharge("19.99", 15) == Decimal("2.9985")
    assert quantize_usd(surcharge("19.99", 15)) == Decimal("3.00")
    assert deduction(30, 10) == Decimal("3")


def test_surcharge_monotonic_in_amount_and_rate():
    amounts = [Decimal("0"), Decimal("0.5"), Decimal("10"), Decimal("999.99")]
    rates = [0, 2.5, 15, 30]
    for rate in rates:
        values = [surcharge(a, rate) for a in amounts]
        assert values == sorted(values)
    for amount in amounts:
        values = [surcharge(amount, r) for r in rates]
        assert values == sorted(values)


def test_rate_precedence_override_then_config_then_default():
    config = {"customer_fee": 12, "seller_fee": 7}
    assert pick_fee_rate(FeeRole.CUSTOMER, 3, config) == 3
    # zero is a real override, not "unset"
    assert pick_fee_rate(FeeRole.SELLER, 0, config) == 0
    assert pick_fee_rate(FeeRole.CUSTOMER, None, config) == 12
    assert pick_fee_rate(FeeRole.SELLER, None, config) == 7
    assert pick_fee_rate(FeeRole.CUSTOMER, None, {}) == DEFAULT_CUSTOMER_FEE
    assert pick_fee_rate(FeeRole.SELLER, None, {}) == DEFAULT_SELLER_FEE


@pytest.mark.asyncio
async def test_resolve_fee_rate_without_config_row(db_session):
    seller = await seed_seller()
    assert await resolve_fee_rate(db_session, FeeRole.CUSTOMER, seller["id"]) == 15
    assert await resolve_fee_rate(db_session, FeeRole.SELLER, seller["id"]) == 10
    # unknown seller is not an error
    assert await resolve_fee_rate(db_session, FeeRole.SELLER, 9999) == 10


@pytest.mark.asyncio
async def test_resolve_fee_rate_uses_config_and_overrides(db_session):
    await seed_fee_config(customer_fee=5, seller_fee=4)
    plain = await seed_seller()
    custom = await seed_seller(custom_customer_fee=1.5, custom_seller_fee=None)

    assert await resolve_fee_rate(db_session, FeeRole.CUSTOMER, plain["id"]) == 5
    assert await resolve_fee_rate(db_session, FeeRole.CUSTOMER, custom["id"]) == 1.5
    assert await resolve_fee_rate(db_session, FeeRole.SELLER, custom["id"]) == 4


@pytest.mark.asyncio
async def test_global_upsert_fills_omitted_field_with_default(db_session):
    await seed_fee_config(customer_fee=5, seller_fee=4)
    await upsert_fee_config(db_session, customer_fee=20, seller_fee=None)
    await db_session.commit()

    config = await get_fee_config(db_session)
    assert config == {"customer_fee": 20, "seller_fee": DEFAULT_SELLER_FEE}


@pytest.mark.asyncio
async def test_admin_fee_endpoints(ac_client, admin_headers):
    resp = await ac_client.get(f"{url_prefix}/admin/config/fees", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"customerFee": 15, "sellerFee": 10}

    resp = await ac_client.post(f"{url_prefix}/admin/config/fees", json={"customerFee": 12.5},
                                headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Fees updated successfully"

    resp = await ac_client.get(f"{url_prefix}/admin/config/fees", headers=admin_headers)
    assert resp.json()["data"] == {"customerFee": 12.5, "sellerFee": 10}


@pytest.mark.asyncio
async def test_admin_seller_override_leaves_omitted_field_alone(ac_client, admin_headers):
    seller = await seed_seller(custom_customer_fee=7, custom_seller_fee=5)

    resp = await ac_client.post(f"{url_prefix}/admin/config/fees",
                                json={"sellerId": seller["id"], "customerFee": 12}, headers=admin_headers)
    assert resp.status_code == 200

    stored = await fetch_seller(seller["id"])
    assert stored["custom_customer_fee"] == 12
    assert stored["custom_seller_fee"] == 5

    # explicit null clears just that override
    resp = await ac_client.post(f"{url_prefix}/admin/config/fees",
                                json={"sellerId": seller["id"], "customerFee": None}, headers=admin_headers)
    assert resp.status_code == 200

    stored = await fetch_seller(seller["id"])
    assert stored["custom_customer_fee"] is None
    assert stored["custom_seller_fee"] == 5


@pytest.mark.asyncio
async def test_admin_fee_validation_and_missing_seller(ac_client, admin_headers):
    resp = await ac_client.post(f"{url_prefix}/admin/config/fees", json={"customerFee": 31}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    resp = await ac_client.post(f"{url_prefix}/admin/config/fees", json={"sellerId": 424242, "customerFee": 1},
                                headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Seller not found"
