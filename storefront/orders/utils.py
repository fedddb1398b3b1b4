import re
from typing import Any, Dict, Optional
from email_validator import validate_email, EmailNotValidError
from fastapi import HTTPException,status
from storefront.schema.full_schema import OrderStatus

STATUS_LABELS = {
    OrderStatus.PENDING_PAYMENT.value: "Pending payment",
    OrderStatus.PENDING_SHIPMENT.value: "Pending shipment",
    OrderStatus.IN_TRANSIT.value: "In transit",
    OrderStatus.DELIVERED.value: "Delivered",
    OrderStatus.CANCELED.value: "Canceled",
}


def status_value(order_status) -> str:
    return order_status.value if isinstance(order_status, OrderStatus) else str(order_status)


def status_label(order_status) -> str:
    value = status_value(order_status)
    return STATUS_LABELS.get(value, value)


def _text(address: Dict[str, Any], key: str) -> str:
    value = address.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _invalid(detail: str):
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def validate_shipping_address(address: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Check a delivery address in a fixed field order and return the cleaned snapshot.
    The first failing field is reported.
    """
    if not isinstance(address, dict):
        _invalid("enderecoEntrega is required")

    cep = re.sub(r"\D", "", _text(address, "cep"))
    if not _text(address, "cep"):
        _invalid("cep is required")
    if len(cep) != 8:
        _invalid("cep must have 8 digits")

    for key in ("logradouro", "numero", "bairro", "cidade"):
        if not _text(address, key):
            _invalid(f"{key} is required")

    uf = _text(address, "uf")
    if not uf:
        _invalid("uf is required")
    if len(uf) != 2 or not uf.isalpha():
        _invalid("uf must have 2 letters")

    if not _text(address, "nomeCompleto"):
        _invalid("nomeCompleto is required")

    email = _text(address, "email")
    if not email:
        _invalid("email is required")
    try:
        email = validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        _invalid(f"Invalid email: {e}")

    if not _text(address, "telefone"):
        _invalid("telefone is required")

    return {
        "cep": cep,
        "logradouro": _text(address, "logradouro"),
        "numero": _text(address, "numero"),
        "complemento": _text(address, "complemento") or None,
        "bairro": _text(address, "bairro"),
        "cidade": _text(address, "cidade"),
        "uf": uf.upper(),
        "nomeCompleto": _text(address, "nomeCompleto"),
        "email": email,
        "telefone": _text(address, "telefone"),
    }
