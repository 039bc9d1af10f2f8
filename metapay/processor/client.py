from typing import Any, Dict, List, Optional
import httpx
from fastapi import Request
from metapay.config.settings import config_settings
from metapay.processor.constants import DEFAULT_FAILURE_MESSAGE, logger
from metapay.processor.models import CheckoutResult, CouponResult, InvoiceDetails, RefundResult


class GatewayError(Exception):
    """Uniform error for anything that goes wrong talking to the processor."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    @property
    def is_conflict(self) -> bool:
        return self.status == 409 or "already exists" in self.message.lower()


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return DEFAULT_FAILURE_MESSAGE
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or DEFAULT_FAILURE_MESSAGE
    return DEFAULT_FAILURE_MESSAGE


class ProcessorClient:
    """
    Outbound client for the SellAuth API.
    One base url, one bearer token, fixed timeout. Shop scoped endpoints live under /shops/<shop_id>.
    """

    def __init__(self, base_url: str = config_settings.SELLAUTH_API_URL,
                 token: Optional[str] = config_settings.SELLAUTH_TOKEN,
                 shop_id: Optional[str] = config_settings.MASTER_SHOP_ID,
                 timeout: float = config_settings.SELLAUTH_TIMEOUT_SECONDS,
                 checkout_base_url: str = config_settings.SELLAUTH_CHECKOUT_URL,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.shop_id = shop_id
        self.checkout_base_url = checkout_base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token or ''}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self):
        await self._client.aclose()

    def _shop_path(self, suffix: str) -> str:
        return f"/shops/{self.shop_id}{suffix}"

    async def call(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        method = method.upper()
        kwargs: Dict[str, Any] = {}
        if payload is not None:
            if method == "GET":
                kwargs["params"] = payload
            else:
                kwargs["json"] = payload

        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("sellauth.transport_error", extra={"method": method, "path": path, "error": str(exc)})
            raise GatewayError(500, str(exc) or DEFAULT_FAILURE_MESSAGE) from exc

        if not resp.is_success:
            message = _error_message(resp)
            logger.error("sellauth.error_response", extra={"method": method, "path": path,
                                                           "status_code": resp.status_code, "error": message})
            raise GatewayError(resp.status_code, message)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise GatewayError(500, "SellAuth returned a non JSON body") from exc

    async def create_checkout(self, *, cart: List[Dict[str, Any]], email: str, coupon: str,
                              ip: str, user_agent: str, gateway: str) -> CheckoutResult:
        body = {
            "cart": cart,
            "ip": ip,
            "user_agent": user_agent,
            "email": email,
            "gateway": gateway,
            "coupon": coupon,
            "newsletter": False,
        }
        data = await self.call("POST", self._shop_path("/checkout"), body) or {}

        invoice_id = data.get("id") or data.get("invoice_id") or data.get("invoiceId")
        if not invoice_id:
            logger.error("sellauth.checkout.missing_invoice_id", extra={"response_keys": list(data.keys())})
            raise GatewayError(500, "Failed to create checkout - no invoice ID")

        invoice_id = str(invoice_id)
        checkout_url = data.get("url") or data.get("checkout_url") or f"{self.checkout_base_url}/{invoice_id}"
        return CheckoutResult(invoice_id=invoice_id, checkout_url=checkout_url)

    async def get_invoice(self, invoice_id: str) -> InvoiceDetails:
        data = await self.call("GET", self._shop_path(f"/invoices/{invoice_id}"))
        return InvoiceDetails.model_validate(data or {})

    async def refund_invoice(self, invoice_id: str, reason: Optional[str] = None) -> RefundResult:
        body = {"reason": reason} if reason else {}
        await self.call("POST", self._shop_path(f"/invoices/{invoice_id}/refund"), body)
        return RefundResult(invoice_id=invoice_id)

    async def create_coupon(self, code: str) -> CouponResult:
        body = {
            "code": code,
            "discount": 0,
            "discount_type": "percentage",
            "max_uses": None,
            "expires_at": None,
        }
        await self.call("POST", self._shop_path("/coupons"), body)
        return CouponResult(code=code)


def get_processor(request: Request) -> ProcessorClient:
    return request.app.state.processor
