"""
Descripteurs d'outcome et deep links vers l'application mobile.

Un outcome ne porte que des champs non sensibles déjà calculés; le rendu
HTML est fait par rendering.render_outcome.
"""
import re
from enum import Enum
from typing import Optional
from urllib.parse import quote, urlencode

from pydantic import BaseModel

from .models import MaterializationResult, OrderType

REASON_MAX_LENGTH = 120

_SECRET_PATTERNS = [
    re.compile(r"\b(?:sk|rk|pk)_(?:live|test)_[A-Za-z0-9]+"),
    re.compile(r"\bwhsec_[A-Za-z0-9]+"),
    re.compile(r"\beyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"),
    re.compile(r"(?i)\bbearer\s+\S+"),
]


class OutcomeKind(str, Enum):
    CANCELLED = "cancelled"
    PAYMENT_INCOMPLETE = "payment_incomplete"
    SUCCESS = "success"
    ERROR = "error"
    UNKNOWN_REDIRECT = "unknown_redirect"


class Outcome(BaseModel):
    kind: OutcomeKind
    title: str
    subtitle: str
    icon: str
    icon_bg: str
    deep_link: str
    button_label: str
    instructions: Optional[str] = None
    order_id: Optional[str] = None


def redact_reason(message: Optional[str]) -> str:
    """
    Raison d'erreur affichable: première ligne, secrets Stripe/JWT masqués,
    120 caractères max, "unknown" si vide.
    """
    lines = (message or "").strip().splitlines()
    text = lines[0].strip() if lines else ""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub("[redacted]", text)
    if len(text) > REASON_MAX_LENGTH:
        text = text[: REASON_MAX_LENGTH - 1].rstrip() + "…"
    return text or "unknown"


class OutcomeFactory:
    """Construit les cinq outcomes pour un schéma de deep link donné (ex: rasvia)."""

    def __init__(self, app_scheme: str = "rasvia", app_name: str = "Rasvia"):
        self.app_scheme = app_scheme
        self.app_name = app_name

    def _link(self, path: str) -> str:
        return f"{self.app_scheme}://{path}"

    @property
    def _return_label(self) -> str:
        return f"Return to {self.app_name}"

    def cancelled(self) -> Outcome:
        return Outcome(
            kind=OutcomeKind.CANCELLED,
            title="Payment Cancelled",
            subtitle="Your payment was not processed. No charges were made.",
            icon="✕",
            icon_bg="#EF4444",
            deep_link=self._link("checkout/cancel"),
            button_label=self._return_label,
        )

    def payment_incomplete(self) -> Outcome:
        return Outcome(
            kind=OutcomeKind.PAYMENT_INCOMPLETE,
            title="Payment Incomplete",
            subtitle="Your payment could not be confirmed. Please try again or contact support.",
            icon="⚠",
            icon_bg="#F59E0B",
            deep_link=self._link("checkout/error?reason=payment_incomplete"),
            button_label=self._return_label,
        )

    def success(self, result: MaterializationResult) -> Outcome:
        params = {}
        if result.order_id:
            params["order_id"] = result.order_id
        params["restaurant_name"] = result.restaurant_name
        params["order_type"] = result.order_type.value
        params["total"] = result.formatted_total
        if result.party_session_id:
            params["party_session_id"] = result.party_session_id

        if result.order_type == OrderType.TAKEOUT:
            instructions = "Your order is being prepared. You'll be notified when it's ready for pickup! 🛍️"
        else:
            instructions = "Your order has been sent to the kitchen. Head to your table when called! 🍽️"

        return Outcome(
            kind=OutcomeKind.SUCCESS,
            title="Payment Successful!",
            subtitle=f"${result.formatted_total} paid to {result.restaurant_name}",
            instructions=instructions,
            icon="✓",
            icon_bg="#22C55E",
            deep_link=self._link(f"order-confirmation?{urlencode(params)}"),
            button_label=f"Continue to {self.app_name}",
            order_id=result.order_id,
        )

    def error(self, reason: str) -> Outcome:
        reason = redact_reason(reason)
        return Outcome(
            kind=OutcomeKind.ERROR,
            title="Something Went Wrong",
            subtitle=reason if reason != "unknown" else "An unexpected error occurred. Your payment may still have been processed.",
            icon="⚠",
            icon_bg="#EF4444",
            deep_link=self._link(f"checkout/error?reason={quote(reason, safe='')}"),
            button_label=self._return_label,
        )

    def unknown_redirect(self) -> Outcome:
        return Outcome(
            kind=OutcomeKind.UNKNOWN_REDIRECT,
            title="Redirecting…",
            subtitle="Taking you back to the app.",
            icon="↻",
            icon_bg="#818CF8",
            deep_link=self._link("checkout/cancel"),
            button_label=self._return_label,
        )
