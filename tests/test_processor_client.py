import json
import httpx
import pytest
from metapay.processor.client import GatewayError, ProcessorClient


def make_client(handler) -> ProcessorClient:
    return ProcessorClient(
        base_url="https://api.sellauth.com/v1",
        token="tok_live",
        shop_id="shop_1",
        timeout=5,
        checkout_base_url="https://checkout.sellauth.com/invoice",
        transport=httpx.MockTransport(handler),
    )


CART = [{"product_id": "prod_dummy", "variant_id": "var_dummy", "quantity": 2300}]


@pytest.mark.asyncio
async def test_create_checkout_sends_cart_and_falls_back_to_default_url():
    seen = {}

    def handler(request: httpx.Request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": 98765})

    client = make_client(handler)
    try:
        result = await client.create_checkout(cart=CART, email="buyer@example.org", coupon="SELLER_000001_ABCDEF12",
                                              ip="8.8.8.8", user_agent="pytest", gateway="NMI")
    finally:
        await client.aclose()

    assert seen["method"] == "POST"
    assert seen["path"] == "/v1/shops/shop_1/checkout"
    assert seen["auth"] == "Bearer tok_live"
    assert seen["body"]["coupon"] == "SELLER_000001_ABCDEF12"
    assert seen["body"]["gateway"] == "NMI"
    assert seen["body"]["newsletter"] is False
    assert result.invoice_id == "98765"
    assert result.checkout_url == "https://checkout.sellauth.com/invoice/98765"


@pytest.mark.asyncio
async def test_create_checkout_reads_alternate_id_and_url_keys():
    def handler(request):
        return httpx.Response(200, json={"invoiceId": "inv_abc", "url": "https://pay.example.org/inv_abc"})

    client = make_client(handler)
    try:
        result = await client.create_checkout(cart=CART, email="buyer@example.org", coupon="C",
                                              ip="8.8.8.8", user_agent="pytest", gateway="NMI")
    finally:
        await client.aclose()

    assert result.invoice_id == "inv_abc"
    assert result.checkout_url == "https://pay.example.org/inv_abc"


@pytest.mark.asyncio
async def test_create_checkout_without_invoice_id_fails():
    client = make_client(lambda request: httpx.Response(200, json={"status": "ok"}))
    try:
        with pytest.raises(GatewayError) as exc_info:
            await client.create_checkout(cart=CART, email="buyer@example.org", coupon="C",
                                         ip="8.8.8.8", user_agent="pytest", gateway="NMI")
    finally:
        await client.aclose()

    assert exc_info.value.status == 500
    assert exc_info.value.message == "Failed to create checkout - no invoice ID"


@pytest.mark.asyncio
async def test_error_responses_carry_status_and_message():
    responses = iter([
        httpx.Response(422, json={"message": "Invalid cart"}),
        httpx.Response(401, json={"error": "Bad token"}),
        httpx.Response(503, text="<html>down</html>"),
    ])
    client = make_client(lambda request: next(responses))
    try:
        with pytest.raises(GatewayError) as first:
            await client.call("POST", "/shops/shop_1/checkout", {})
        with pytest.raises(GatewayError) as second:
            await client.call("GET", "/shops/shop_1/invoices/1")
        with pytest.raises(GatewayError) as third:
            await client.call("GET", "/shops/shop_1/invoices/1")
    finally:
        await client.aclose()

    assert (first.value.status, first.value.message) == (422, "Invalid cart")
    assert (second.value.status, second.value.message) == (401, "Bad token")
    assert (third.value.status, third.value.message) == (503, "SellAuth failure")


@pytest.mark.asyncio
async def test_transport_failure_maps_to_500():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    try:
        with pytest.raises(GatewayError) as exc_info:
            await client.get_invoice("inv_1")
    finally:
        await client.aclose()

    assert exc_info.value.status == 500


@pytest.mark.asyncio
async def test_get_sends_payload_as_query_params():
    seen = {}

    def handler(request):
        seen["query"] = dict(request.url.params)
        seen["content"] = request.content
        return httpx.Response(200, json=[])

    client = make_client(handler)
    try:
        await client.call("GET", "/shops/shop_1/invoices", {"page": 2})
    finally:
        await client.aclose()

    assert seen["query"] == {"page": "2"}
    assert seen["content"] == b""


@pytest.mark.asyncio
async def test_get_invoice_parses_details():
    def handler(request):
        assert request.url.path == "/v1/shops/shop_1/invoices/inv_7"
        return httpx.Response(200, json={"id": 7, "paid_usd": "23.00", "email": "buyer@example.org",
                                         "gateway": "NMI", "status": "completed", "items": []})

    client = make_client(handler)
    try:
        details = await client.get_invoice("inv_7")
    finally:
        await client.aclose()

    assert details.paid_usd == 23.0
    assert details.email == "buyer@example.org"
    assert details.gateway == "NMI"


@pytest.mark.asyncio
async def test_coupon_conflict_detection():
    responses = iter([
        httpx.Response(409, json={"message": "duplicate"}),
        httpx.Response(400, json={"message": "Coupon code already exists"}),
        httpx.Response(400, json={"message": "Discount invalid"}),
    ])
    client = make_client(lambda request: next(responses))
    errors = []
    try:
        for _ in range(3):
            with pytest.raises(GatewayError) as exc_info:
                await client.create_coupon("SELLER_000001_ABCDEF12")
            errors.append(exc_info.value)
    finally:
        await client.aclose()

    assert [e.is_conflict for e in errors] == [True, True, False]


@pytest.mark.asyncio
async def test_refund_posts_reason():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    client = make_client(handler)
    try:
        result = await client.refund_invoice("inv_9", "Customer changed mind")
    finally:
        await client.aclose()

    assert seen["path"] == "/v1/shops/shop_1/invoices/inv_9/refund"
    assert seen["body"] == {"reason": "Customer changed mind"}
    assert result.invoice_id == "inv_9"


@pytest.mark.asyncio
async def test_refund_without_reason_omits_the_key():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    client = make_client(handler)
    try:
        await client.refund_invoice("inv_9")
    finally:
        await client.aclose()

    assert seen["body"] == {}
