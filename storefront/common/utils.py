from datetime import datetime,timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

CENTS = Decimal("0.01")

def now() -> datetime:
    return datetime.now(timezone.utc)


def to_money(value) -> Decimal:
    """Quantize to cents , floats go through str so 0.1 stays 0.1"""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def money_out(value: Optional[Decimal]) -> Optional[float]:
    if value is None:
        return None
    return float(to_money(value))


def build_error(message: Any,
                extra: Optional[Dict[str, Any]] = None,
                request_id: Optional[str] = None) -> Dict[str, Any]:

    body: Dict[str, Any] = {"error": message}
    if extra:
        body.update(extra)
    if request_id:
        body["request_id"] = request_id
    return body

def json_ok(content: Dict[str, Any], status_code: int = 200,headers = None) -> JSONResponse:
    return JSONResponse(jsonable_encoder(content), status_code=status_code,headers=headers)

def json_error(content: Dict[str, Any], status_code: int = 500, headers=None) -> JSONResponse:
    return JSONResponse(jsonable_encoder(content), status_code=status_code, headers=headers)

def success_response(data: Dict[str, Any], status_code: int = 200,headers: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return json_ok(data, status_code=status_code,headers=headers)
