"""Checkout exceptions."""

from __future__ import annotations


class CheckoutSessionNotFound(Exception):
    """The session is unknown, expired, already consumed or not the caller's."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Checkout session {session_id} not found.")


class EmptyCheckout(Exception):
    """A checkout was started without any items."""
