from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse
from fastapi import HTTPException,status
from storefront.common.utils import to_money


def bad_request(detail: str):
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def parse_int(value: Any) -> Optional[int]:
    """Accept ints and integer-looking strings/floats , anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        v = value.strip()
        if v.lstrip("-").isdigit():
            return int(v)
    return None


def parse_positive_id(value: Any, label: str) -> int:
    parsed = parse_int(value)
    if parsed is None or parsed <= 0:
        bad_request(f"{label} must be a valid number")
    return parsed


def parse_price(value: Any) -> Decimal:
    if isinstance(value, bool):
        bad_request("Price must be a positive number")
    try:
        price = to_money(value)
    except (InvalidOperation, TypeError, ValueError):
        bad_request("Price must be a positive number")
    if not price.is_finite() or price <= 0:
        bad_request("Price must be a positive number")
    return price


def parse_stock(value: Any) -> int:
    if isinstance(value, float):
        value = int(value)
    parsed = parse_int(value)
    if parsed is None or parsed < 0:
        bad_request("Stock must be an integer greater than or equal to zero")
    return parsed


def parse_active(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        v = value.strip().lower()
        if v in ("true", "1"):
            return True
        if v in ("false", "0"):
            return False
    bad_request("Invalid value for ativo")


def clean_str_list(value: Any, label: str) -> List[str]:
    """Trim entries and drop blanks , None means an empty list."""
    if value is None:
        return []
    if not isinstance(value, list):
        bad_request(f"{label} must be a list of strings or null")
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def clean_image_urls(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        bad_request("imagens must be a list of URLs")
    urls = []
    for raw in value:
        if not isinstance(raw, str) or not raw.strip():
            continue
        url = raw.strip()
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            bad_request(f"Invalid image URL: {url}")
        urls.append(url)
    return urls


def normalize_stock_map(value: Any) -> Optional[Dict[str, int]]:
    """
    Clean a "{color}-{size}" -> units map.
    Keys are trimmed , entries whose value is not a non-negative integer are dropped.
    An empty result is stored as None (product without variant tracking).
    """
    if value is None:
        return None
    if not isinstance(value, dict):
        bad_request("estoquePorVariante must be an object")
    out: Dict[str, int] = {}
    for key, raw in value.items():
        k = str(key).strip()
        if not k:
            continue
        if isinstance(raw, float):
            raw = int(raw)
        units = parse_int(raw)
        if units is None or units < 0:
            continue
        out[k] = units
    return out or None
