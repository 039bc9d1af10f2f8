import pytest
from metapay.processor.client import GatewayError
from metapay.schema.full_schema import Transaction, TransactionStatus
from tests.factories import count_rows, fetch_seller, fetch_transaction, seed_seller, seed_transaction, seller_headers

url_prefix="/api/v1"

PAYMENT = {"amount": 20, "currency": "usd", "customer_email": "buyer@example.org", "description": "Order #1001"}


@pytest.mark.asyncio
async def test_create_payment_records_pending_transaction(ac_client, fake_processor):
    seller = await seed_seller()

    resp = await ac_client.post(f"{url_prefix}/payments", json=PAYMENT,
                                headers={**seller_headers(seller), "User-Agent": "shop-backend/1.0"})
    assert resp.status_code == 200
    body = resp.json()
    invoice_id = body["invoice_id"]
    assert body["checkout_url"] == f"https://checkout.sellauth.com/invoice/{invoice_id}"

    sent = fake_processor.checkouts[0]
    # $20 + 15% surcharge = $23 = 2300 units of the $0.01 product
    assert sent["cart"] == [{"product_id": "prod_dummy", "variant_id": "var_dummy", "quantity": 2300}]
    assert sent["coupon"] == seller["coupon_code"]
    assert sent["gateway"] == "NMI"
    assert sent["ip"] == "8.8.8.8"
    assert sent["user_agent"] == "shop-backend/1.0"
    assert sent["email"] == "buyer@example.org"

    tx = await fetch_transaction(invoice_id)
    assert tx["seller_id"] == seller["id"]
    assert (tx["amount"], tx["customer_fee"], tx["net_to_seller"]) == (2000, 300, 2000)
    assert tx["status"] == "pending"
    assert tx["description"] == "Order #1001"


@pytest.mark.asyncio
async def test_create_payment_uses_seller_customer_fee_override(ac_client, fake_processor):
    seller = await seed_seller(custom_customer_fee=0)

    resp = await ac_client.post(f"{url_prefix}/payments", json={**PAYMENT, "amount": 10.99}, headers=seller_headers(seller))
    assert resp.status_code == 200
    assert fake_processor.checkouts[0]["cart"][0]["quantity"] == 1099
    tx = await fetch_transaction(resp.json()["invoice_id"])
    assert tx["customer_fee"] == 0


@pytest.mark.asyncio
async def test_quantity_rounds_down(ac_client, fake_processor):
    seller = await seed_seller()

    # 0.99 * 1.15 = 1.1385 -> 113 units
    resp = await ac_client.post(f"{url_prefix}/payments", json={**PAYMENT, "amount": 0.99}, headers=seller_headers(seller))
    assert resp.status_code == 200
    assert fake_processor.checkouts[0]["cart"][0]["quantity"] == 113
    tx = await fetch_transaction(resp.json()["invoice_id"])
    assert tx["customer_fee"] == 15


@pytest.mark.asyncio
async def test_create_payment_validation(ac_client, fake_processor):
    seller = await seed_seller()
    headers = seller_headers(seller)

    resp = await ac_client.post(f"{url_prefix}/payments", json={**PAYMENT, "amount": 0.49}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Minimum $0.50"

    resp = await ac_client.post(f"{url_prefix}/payments", json={**PAYMENT, "amount": 100000.01}, headers=headers)
    assert resp.json()["error"] == "Maximum $100,000 per transaction"

    resp = await ac_client.post(f"{url_prefix}/payments", json={**PAYMENT, "currency": "eur"}, headers=headers)
    assert resp.json()["error"] == "Only USD supported"

    resp = await ac_client.post(f"{url_prefix}/payments", json={**PAYMENT, "customer_email": "nope"}, headers=headers)
    assert resp.json()["error"] == "Invalid customer email"

    assert fake_processor.checkouts == []


@pytest.mark.asyncio
async def test_create_payment_processor_failure(ac_client, fake_processor):
    seller = await seed_seller()
    fake_processor.checkout_error = GatewayError(422, "Invalid cart")

    resp = await ac_client.post(f"{url_prefix}/payments", json=PAYMENT, headers=seller_headers(seller))
    assert resp.status_code == 500
    assert resp.json()["error"] == "Invalid cart"
    assert await count_rows(Transaction) == 0


@pytest.mark.asyncio
async def test_create_payment_requires_approved_seller(ac_client, fake_processor):
    seller = await seed_seller(status="suspended")
    resp = await ac_client.post(f"{url_prefix}/payments", json=PAYMENT, headers=seller_headers(seller))
    assert resp.status_code == 403
    assert fake_processor.checkouts == []


@pytest.mark.asyncio
async def test_list_invoices_paginates_own_rows(ac_client):
    seller = await seed_seller()
    other = await seed_seller()
    await seed_transaction(seller["id"], "inv_a")
    await seed_transaction(seller["id"], "inv_b", tx_status=TransactionStatus.COMPLETED)
    await seed_transaction(seller["id"], "inv_c")
    await seed_transaction(other["id"], "inv_x")

    resp = await ac_client.get(f"{url_prefix}/invoices", params={"perPage": 2}, headers=seller_headers(seller))
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "perPage": 2, "total": 3, "pages": 2}

    resp = await ac_client.get(f"{url_prefix}/invoices", params={"status": "completed"}, headers=seller_headers(seller))
    assert [r["invoice_id"] for r in resp.json()["data"]] == ["inv_b"]
    assert resp.json()["data"][0]["amount"] == 20.0

    resp = await ac_client.get(f"{url_prefix}/invoices", params={"perPage": 101}, headers=seller_headers(seller))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_get_invoice_with_processor_details(ac_client, fake_processor):
    seller = await seed_seller()
    await seed_transaction(seller["id"], "inv_a")

    resp = await ac_client.get(f"{url_prefix}/invoices/inv_a", headers=seller_headers(seller))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["id"] == "inv_a"
    assert data["netToSeller"] == 20.0
    assert data["sellauth"] == {"paid_usd": 23.0, "email": "buyer@example.org", "gateway": "NMI"}

    fake_processor.invoice_error = GatewayError(500, "timeout")
    resp = await ac_client.get(f"{url_prefix}/invoices/inv_a", headers=seller_headers(seller))
    assert resp.status_code == 200
    assert resp.json()["data"]["sellauth"] is None


@pytest.mark.asyncio
async def test_get_invoice_ownership(ac_client):
    seller = await seed_seller()
    other = await seed_seller()
    await seed_transaction(other["id"], "inv_x")

    resp = await ac_client.get(f"{url_prefix}/invoices/inv_x", headers=seller_headers(seller))
    assert resp.status_code == 403

    resp = await ac_client.get(f"{url_prefix}/invoices/inv_missing", headers=seller_headers(seller))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_refund_completed_payment_debits_balance(ac_client, fake_processor):
    seller = await seed_seller(balance=5000)
    await seed_transaction(seller["id"], "inv_a", tx_status=TransactionStatus.COMPLETED)

    resp = await ac_client.post(f"{url_prefix}/refunds/inv_a", json={"reason": "Customer changed mind"},
                                headers=seller_headers(seller))
    assert resp.status_code == 200
    assert resp.json()["message"] == "Refund initiated successfully"
    assert fake_processor.refunds == [{"invoice_id": "inv_a", "reason": "Customer changed mind"}]
    assert (await fetch_transaction("inv_a"))["status"] == "refunded"
    assert (await fetch_seller(seller["id"]))["balance"] == 3000


@pytest.mark.asyncio
async def test_refund_rules(ac_client, fake_processor):
    seller = await seed_seller(balance=5000)
    other = await seed_seller(balance=5000)
    await seed_transaction(seller["id"], "inv_pending")
    await seed_transaction(other["id"], "inv_other", tx_status=TransactionStatus.COMPLETED)
    await seed_transaction(seller["id"], "inv_done", tx_status=TransactionStatus.COMPLETED)
    headers = seller_headers(seller)

    resp = await ac_client.post(f"{url_prefix}/refunds/inv_pending", json={}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Can only refund completed payments"

    resp = await ac_client.post(f"{url_prefix}/refunds/inv_other", json={}, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "Not your transaction"

    resp = await ac_client.post(f"{url_prefix}/refunds/inv_missing", json={}, headers=headers)
    assert resp.status_code == 404

    resp = await ac_client.post(f"{url_prefix}/refunds/inv_done", json={"reason": "meh"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Reason too short"

    assert fake_processor.refunds == []
    assert (await fetch_seller(seller["id"]))["balance"] == 5000


@pytest.mark.asyncio
async def test_refund_refused_when_balance_cannot_cover_it(ac_client, fake_processor):
    seller = await seed_seller(balance=500)
    await seed_transaction(seller["id"], "inv_a", tx_status=TransactionStatus.COMPLETED)

    resp = await ac_client.post(f"{url_prefix}/refunds/inv_a", json={}, headers=seller_headers(seller))
    assert resp.status_code == 400
    assert fake_processor.refunds == []
    assert (await fetch_transaction("inv_a"))["status"] == "completed"
    assert (await fetch_seller(seller["id"]))["balance"] == 500


@pytest.mark.asyncio
async def test_admin_lists_transactions_with_seller(ac_client, admin_headers):
    seller = await seed_seller()
    other = await seed_seller()
    await seed_transaction(seller["id"], "inv_a")
    await seed_transaction(other["id"], "inv_b")

    resp = await ac_client.get(f"{url_prefix}/admin/transactions", params={"sellerId": seller["id"]},
                               headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"] == {"page": 1, "perPage": 20, "total": 1, "pages": 1}
    row = body["data"][0]
    assert row["invoice_id"] == "inv_a"
    assert row["seller"]["email"] == seller["email"]
