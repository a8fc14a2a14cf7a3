"""
Small query helpers shared by the repositories.
"""

from __future__ import annotations

from sqlalchemy import ColumnElement


def ilike_contains(column, text: str) -> ColumnElement[bool]:  # noqa: ANN001
    """Case-insensitive substring match on *column*."""
    # Escape SQL LIKE metacharacters to prevent wildcard injection
    safe = text.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_")
    return column.ilike(f"%{safe}%", escape="\\")
