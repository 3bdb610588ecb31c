"""
Cas d'usage 'payments': vérification de la session Stripe, matérialisation
de la commande, création de la session Checkout.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from . import cart as cart_logic
from . import metadata as meta
from .errors import StoreWriteFailed
from .models import (
    CheckoutIntent,
    CheckoutSession,
    MaterializationResult,
    OrderStatus,
    OrderType,
    PartySessionStatus,
    WriteResult,
)

logger = logging.getLogger(__name__)

PAYMENT_METHOD = "card"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def verify_checkout_session(provider, session_id: str) -> CheckoutSession:
    """
    Relit la session auprès de Stripe: le paramètre status=success de la
    redirection n'est pas une preuve de paiement.
    - provider: objet exposant retrieve_session(session_id)
    - Lève ProviderUnavailable si l'appel échoue; aucun effet de bord.
    """
    session = provider.retrieve_session(session_id)
    logger.info("payments.service.verify session_id=%s payment_status=%s", session_id, session.payment_status)
    return session


def build_order_row(intent: CheckoutIntent, subtotal, created_at: str) -> Dict[str, Any]:
    status = OrderStatus.PREPARING if intent.order_type == OrderType.TAKEOUT else OrderStatus.ACTIVE
    return {
        "restaurant_id": intent.restaurant_id,
        "table_number": None,
        "party_size": 1,
        "order_type": intent.order_type.value,
        "status": status.value,
        "meal_period": "dinner",
        "subtotal": float(subtotal),
        "tip_amount": 0,
        "payment_method": PAYMENT_METHOD,
        "notes": None,
        "waitlist_entry_id": None,
        "party_session_id": intent.party_session_id or None,
        "customer_name": intent.customer_name or None,
        "created_by": intent.user_id or None,
        "created_at": created_at,
    }


def build_order_item_rows(order_id: Any, intent: CheckoutIntent) -> List[Dict[str, Any]]:
    return [
        {
            "order_id": order_id,
            "menu_item_id": line.menu_item_id,
            "name": line.name or "Unknown Item",
            "price": float(line.price),
            "quantity": line.quantity,
            "is_vegetarian": line.is_vegetarian,
        }
        for line in intent.cart_items
    ]


def build_group_order_row(intent: CheckoutIntent, subtotal, submitted_at: str) -> Dict[str, Any]:
    items = [
        {
            "name": line.name or "Unknown",
            "price": float(line.price),
            "quantity": line.quantity,
            "added_by": line.added_by or intent.customer_name or "Unknown",
        }
        for line in intent.cart_items
    ]
    return {
        "party_session_id": intent.party_session_id,
        "restaurant_id": intent.restaurant_id,
        "items": items,
        "total": float(subtotal),
        "submitted_at": submitted_at,
    }


class OrderMaterializer:
    """
    Transforme un CheckoutIntent vérifié en enregistrements durables:
    orders, order_items et, pour une party session, party_sessions + group_orders.

    Politique best-effort: chaque écriture produit un WriteResult; un échec
    n'interrompt pas les suivantes (sauf order_items, qui exige une commande).
    Aucune déduplication: rejouer la même session crée de nouvelles lignes.
    """

    def __init__(self, store, now: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.now = now or utc_now

    def _attempt(self, operation: str, fn: Callable[[], Any], writes: List[WriteResult]) -> Optional[Any]:
        try:
            data = fn()
        except StoreWriteFailed as e:
            logger.warning("payments.service.materialize %s failed: %s", operation, e)
            writes.append(WriteResult(operation=operation, ok=False, error=str(e)))
            return None
        writes.append(WriteResult(operation=operation, ok=True, data=data if isinstance(data, dict) else None))
        return data

    def materialize(self, intent: CheckoutIntent) -> MaterializationResult:
        result = MaterializationResult(
            restaurant_name=intent.restaurant_name,
            order_type=intent.order_type,
            party_session_id=intent.party_session_id or None,
        )
        if not intent.can_materialize:
            logger.warning(
                "payments.service.materialize skipped restaurant_id=%s items=%s",
                intent.restaurant_id,
                len(intent.cart_items),
            )
            return result

        subtotal = intent.subtotal
        result.subtotal = subtotal
        timestamp = self.now().isoformat()

        order = self._attempt("create_order", lambda: self.store.create_order(build_order_row(intent, subtotal, timestamp)), result.writes)
        if order:
            result.order_id = str(order["id"])
            items = build_order_item_rows(order["id"], intent)
            self._attempt("create_order_items", lambda: self.store.create_order_items(items), result.writes)

        if intent.party_session_id:
            self._attempt(
                "update_party_session",
                lambda: self.store.update_party_session(
                    intent.party_session_id, PartySessionStatus.SUBMITTED.value, timestamp
                ),
                result.writes,
            )
            self._attempt(
                "create_group_order_summary",
                lambda: self.store.create_group_order_summary(build_group_order_row(intent, subtotal, timestamp)),
                result.writes,
            )

        logger.info(
            "payments.service.materialize order_id=%s subtotal=%s party_session_id=%s failed=%s",
            result.order_id,
            result.formatted_total,
            result.party_session_id,
            [w.operation for w in result.failed_writes],
        )
        return result


def create_checkout(
    provider,
    *,
    restaurant_id: Any,
    stripe_account_id: str,
    amount: Any,
    redirect_base_url: str,
    currency: str,
    restaurant_name: Optional[str] = None,
    customer_name: Optional[str] = None,
    user_id: Optional[str] = None,
    order_type: Optional[str] = None,
    party_session_id: Optional[str] = None,
    cart_items: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Prépare la session Stripe Checkout d'un panier.
    La metadata porte tout ce que /payment-redirect relira pour créer la commande.
    """
    line_items = cart_logic.to_line_items(amount=amount, restaurant_name=restaurant_name, currency=currency)
    metadata = meta.make_metadata(
        restaurant_id=restaurant_id,
        restaurant_name=restaurant_name,
        customer_name=customer_name,
        user_id=user_id,
        order_type=order_type,
        party_session_id=party_session_id,
        cart_items=cart_items,
    )
    logger.info("payments.service.create_checkout restaurant_id=%s amount=%s", restaurant_id, amount)
    session = provider.create_session(
        payment_method_types=["card"],
        line_items=line_items,
        mode="payment",
        metadata=metadata,
        payment_intent_data=cart_logic.payment_intent_data(stripe_account_id),
        **cart_logic.redirect_urls(redirect_base_url),
    )
    return {"url": session.get("url"), "session_id": session.get("id")}
