import math
from datetime import datetime,timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from metapay.common.constants import request_id_ctx

CENT = Decimal("0.01")


def now() -> datetime:
    return datetime.now(timezone.utc)


# money is persisted as integer USD cents
def to_decimal(value: Union[int, float, str, Decimal]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))

def to_cents(value: Union[int, float, str, Decimal]) -> int:
    return int((to_decimal(value) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def from_cents(cents: Optional[int]) -> Optional[float]:
    if cents is None:
        return None
    return float((Decimal(int(cents)) / 100).quantize(CENT))


def pagination_meta(page: int, per_page: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "perPage": per_page,
        "total": total,
        "pages": math.ceil(total / per_page) if per_page else 0,
    }


def build_success(data: Any = None, message: Optional[str] = None,
                  request_id: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    body["request_id"] = request_id or request_id_ctx.get()
    return jsonable_encoder(body)

def build_error(message: Any = "Internal server error",
                code: Union[str, int] = "SERVER_ERROR",
                request_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "error": message,
        "code": code,
        "request_id": request_id or request_id_ctx.get(),
    }

def json_ok(content: Dict[str, Any], status_code: int = 200,headers = None) -> JSONResponse:
    return JSONResponse(content, status_code=status_code,headers=headers)

def json_error(content: Dict[str, Any], status_code: int = 500, headers=None) -> JSONResponse:
    return JSONResponse(content, status_code=status_code, headers=headers)

def success_response(data: Any = None, status_code: int = 200, message: Optional[str] = None,
                     headers: Optional[Dict[str, Any]] = None, **extra: Any) -> JSONResponse:
    content = build_success(data, message=message, **extra)
    return json_ok(content, status_code=status_code,headers=headers)
