"""
Construction de la session Checkout (pas de Stripe, pas de DB).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

# module rasvia_backend.payments.cart
def amount_to_cents(amount: Any) -> int:
    """
    Convertit un montant en dollars vers des centimes (arrondi au plus proche).
    - Soulève HTTPException(400) si le montant est invalide ou <= 0.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise HTTPException(status_code=400, detail="Montant invalide")
    if not value.is_finite() or value <= 0:
        raise HTTPException(status_code=400, detail="Montant invalide")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def product_name(restaurant_name: Optional[str]) -> str:
    return f"Order at {restaurant_name}" if restaurant_name else "Rasvia Group Order"

def to_line_items(*, amount: Any, restaurant_name: Optional[str], currency: str) -> List[Dict[str, Any]]:
    """
    Une seule ligne Stripe pour le montant total du panier (le détail
    voyage dans la metadata).
    """
    return [{
        "quantity": 1,
        "price_data": {
            "currency": currency,
            "unit_amount": amount_to_cents(amount),
            "product_data": {"name": product_name(restaurant_name)},
        },
    }]

def redirect_urls(redirect_base_url: str) -> Dict[str, str]:
    """
    URLs de retour Stripe vers /payment-redirect.
    {CHECKOUT_SESSION_ID} est substitué par Stripe.
    """
    base = redirect_base_url.rstrip("?")
    sep = "&" if "?" in base else "?"
    return {
        "success_url": f"{base}{sep}status=success&session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{base}{sep}status=cancel",
    }

def payment_intent_data(stripe_account_id: str) -> Dict[str, Any]:
    """Reverse l'intégralité du paiement au compte Connect du restaurant (aucune commission)."""
    return {
        "application_fee_amount": 0,
        "transfer_data": {"destination": stripe_account_id},
    }
