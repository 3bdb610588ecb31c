import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from rasvia_backend.config import CHECKOUT_CURRENCY, PAYMENT_REDIRECT_URL
from rasvia_backend.utils.rate_limit import optional_rate_limit

from . import service as payments_service
from .dependencies import get_checkout_provider, get_payment_workflow
from .rendering import render_outcome

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Payments"])
api_router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

NO_STORE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate, max-age=0"}


class CheckoutRequest(BaseModel):
    restaurant_id: Optional[int] = None
    stripe_account_id: str = Field(min_length=1)
    amount: float
    party_session_id: Optional[str] = None
    cart_items: List[Dict[str, Any]] = Field(default_factory=list)
    restaurant_name: Optional[str] = None
    customer_name: Optional[str] = None
    user_id: Optional[str] = None
    order_type: Optional[str] = None


# module rasvia_backend.payments.views
@router.get(
    "/payment-redirect",
    name="payment_redirect",
    response_class=HTMLResponse,
    dependencies=[Depends(optional_rate_limit(times=30, seconds=60))],
)
def payment_redirect(
    status: Optional[str] = Query(default=None),
    session_id: Optional[str] = Query(default=None),
    workflow=Depends(get_payment_workflow),
):
    """
    Page de retour Stripe Checkout (success_url / cancel_url).
    - status=cancel: page d'annulation, aucun appel Stripe/Supabase
    - status=success&session_id=...: vérifie le paiement puis enregistre la commande
    - autre: redirection générique vers l'app
    Toujours 200 + HTML (le deep link porte l'issue), jamais mis en cache.
    """
    outcome = workflow.handle(status, session_id)
    logger.info("payments.views.payment_redirect outcome=%s order_id=%s", outcome.kind.value, outcome.order_id)
    return HTMLResponse(render_outcome(outcome), headers=NO_STORE_HEADERS)


@api_router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout_session(
    body: CheckoutRequest,
    request: Request,
    provider=Depends(get_checkout_provider),
):
    """
    Crée une session Checkout Stripe pour le panier (individuel ou de groupe).
    - Entrée JSON: {restaurant_id, stripe_account_id, amount, cart_items, ...}
    - Retour: {"url": "<checkout stripe>", "session_id": "cs_..."}
    - Erreurs: 400 si montant invalide, 502 si Stripe échoue
    """
    redirect_base_url = PAYMENT_REDIRECT_URL or str(request.url_for("payment_redirect"))
    return payments_service.create_checkout(
        provider,
        restaurant_id=body.restaurant_id,
        stripe_account_id=body.stripe_account_id,
        amount=body.amount,
        redirect_base_url=redirect_base_url,
        currency=CHECKOUT_CURRENCY,
        restaurant_name=body.restaurant_name,
        customer_name=body.customer_name,
        user_id=body.user_id,
        order_type=body.order_type,
        party_session_id=body.party_session_id,
        cart_items=body.cart_items,
    )
