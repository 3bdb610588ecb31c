"""
Fabriques FastAPI (Depends) de la feature 'payments'.
Remplaçables en tests via app.dependency_overrides.
"""
from fastapi import Depends

from rasvia_backend.config import APP_DISPLAY_NAME, APP_SCHEME, STRIPE_API_VERSION, STRIPE_SECRET_KEY

from .outcomes import OutcomeFactory
from .repository import SupabaseOrderStore
from .stripe_client import StripeCheckoutGateway
from .workflow import PaymentRedirectWorkflow


def get_checkout_provider() -> StripeCheckoutGateway:
    return StripeCheckoutGateway(STRIPE_SECRET_KEY, STRIPE_API_VERSION)


def get_order_store() -> SupabaseOrderStore:
    return SupabaseOrderStore()


def get_payment_workflow(
    provider=Depends(get_checkout_provider),
    store=Depends(get_order_store),
) -> PaymentRedirectWorkflow:
    return PaymentRedirectWorkflow(
        provider,
        store,
        outcomes=OutcomeFactory(app_scheme=APP_SCHEME, app_name=APP_DISPLAY_NAME),
    )
