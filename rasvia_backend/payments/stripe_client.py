"""
Adaptateur Stripe: centralise les appels Checkout et la configuration Stripe.

La clé est passée à chaque appel (api_key=...) plutôt que via stripe.api_key,
pour que la passerelle soit injectable et remplaçable en tests.
"""
import logging
from typing import Any, Dict, Optional

import stripe

from .errors import ProviderUnavailable
from .models import CheckoutSession

logger = logging.getLogger(__name__)

# module rasvia_backend.payments.stripe_client
def _as_dict(obj: Any) -> Dict[str, Any]:
    """StripeObject -> dict (récursif si le SDK le permet)."""
    if obj is None:
        return {}
    if isinstance(obj, dict) and not hasattr(obj, "to_dict"):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)

def to_checkout_session(raw: Any) -> CheckoutSession:
    """
    Normalise une session Stripe (objet SDK ou dict) en CheckoutSession.
    Les valeurs de metadata sont forcées en chaînes.
    """
    data = _as_dict(raw)
    metadata = _as_dict(data.get("metadata"))
    return CheckoutSession(
        id=str(data.get("id") or ""),
        payment_status=str(data.get("payment_status") or ""),
        metadata={str(k): "" if v is None else str(v) for k, v in metadata.items()},
    )


class StripeCheckoutGateway:
    """
    Passerelle vers Stripe Checkout.
    - retrieve_session: lecture seule, source de vérité du paiement
    - create_session: création de la session (flux create-checkout)
    Toute erreur SDK/réseau/auth est convertie en ProviderUnavailable.
    """

    def __init__(self, api_key: str, api_version: Optional[str] = None):
        self.api_key = api_key
        self.api_version = api_version

    def require_stripe(self) -> None:
        if not self.api_key:
            logger.error("payments.stripe_client STRIPE_SECRET_KEY manquant")
            raise ProviderUnavailable()

    def _request_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"api_key": self.api_key}
        if self.api_version:
            options["stripe_version"] = self.api_version
        return options

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        """
        Récupère une session Stripe Checkout par son identifiant.
        Retour: CheckoutSession(id, payment_status, metadata).
        """
        self.require_stripe()
        try:
            raw = stripe.checkout.Session.retrieve(session_id, **self._request_options())
        except Exception as e:
            logger.exception("payments.stripe_client.retrieve_session failed session_id=%s", session_id)
            raise ProviderUnavailable() from e
        return to_checkout_session(raw)

    def create_session(self, **params: Any) -> Dict[str, Any]:
        """
        Crée une session Stripe Checkout.
        Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
        """
        self.require_stripe()
        try:
            session = stripe.checkout.Session.create(**params, **self._request_options())
        except Exception as e:
            logger.exception("payments.stripe_client.create_session failed")
            raise ProviderUnavailable() from e
        return _as_dict(session)
