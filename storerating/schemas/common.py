"""Shared schema base and small response bodies."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_SPECIAL_RE = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python; both accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Reusable field checks ───────────────────────────────────────────
def check_name(v: str) -> str:
    v = v.strip()
    if not 3 <= len(v) <= 60:
        raise ValueError("Name must be between 3 and 60 characters")
    return v


def check_email(v: str) -> str:
    v = v.strip().lower()
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError("Must provide a valid email address")
    return v


def check_address(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if len(v) > 400:
        raise ValueError("Address must be at most 400 characters")
    return v


def check_password(v: str) -> str:
    if not 8 <= len(v) <= 16:
        raise ValueError("Password must be between 8 and 16 characters")
    if not any(c.isupper() for c in v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not _SPECIAL_RE.search(v):
        raise ValueError("Password must contain at least one special character")
    return v


# ── Generic ────────────────────────────────────────────────────────
class MessageResponse(ApiModel):
    message: str


class DeleteResponse(ApiModel):
    success: bool
    message: str


class HealthResponse(ApiModel):
    db: bool
