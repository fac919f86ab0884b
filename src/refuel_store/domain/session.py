"""Signed-in customer context."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionContext:
    """Identity of the signed-in customer, passed explicitly to services."""

    session_id: str
    email: str
    display_name: str | None = None
