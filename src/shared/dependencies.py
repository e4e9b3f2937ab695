"""FastAPI dependencies shared by the routers."""

from fastapi import Header, HTTPException


def optional_customer_id(x_customer_id: str | None = Header(default=None)) -> str | None:
    return (x_customer_id or "").strip() or None


def required_customer_id(x_customer_id: str | None = Header(default=None)) -> str:
    customer_id = (x_customer_id or "").strip()
    if not customer_id:
        raise HTTPException(status_code=401, detail="X-Customer-Id header is required")
    return customer_id
