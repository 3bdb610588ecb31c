"""
Module 'payments' (feature-first): point d'entrée public.
Réunit décodage metadata, client Stripe, repository BD, matérialisation,
outcomes/rendu et le workflow du retour Stripe.
"""

from .errors import PaymentError, ProviderUnavailable, StoreWriteFailed
from .models import CartLine, CheckoutIntent, CheckoutSession, MaterializationResult, OrderType, WriteResult
from .metadata import decode_checkout_intent, encode_cart_items, make_metadata
from .stripe_client import StripeCheckoutGateway
from .repository import SupabaseOrderStore
from .service import OrderMaterializer, create_checkout, verify_checkout_session
from .outcomes import Outcome, OutcomeFactory, OutcomeKind, redact_reason
from .rendering import render_outcome
from .workflow import PaymentRedirectWorkflow

__all__ = [
    # errors
    "PaymentError",
    "ProviderUnavailable",
    "StoreWriteFailed",
    # models
    "CartLine",
    "CheckoutIntent",
    "CheckoutSession",
    "MaterializationResult",
    "OrderType",
    "WriteResult",
    # metadata
    "decode_checkout_intent",
    "encode_cart_items",
    "make_metadata",
    # stripe / repository
    "StripeCheckoutGateway",
    "SupabaseOrderStore",
    # services
    "OrderMaterializer",
    "create_checkout",
    "verify_checkout_session",
    # outcomes
    "Outcome",
    "OutcomeFactory",
    "OutcomeKind",
    "redact_reason",
    "render_outcome",
    "PaymentRedirectWorkflow",
]
