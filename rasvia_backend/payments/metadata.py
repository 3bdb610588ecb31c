"""
Sérialisation/désérialisation des métadonnées Stripe de la session Checkout.

Le décodage est volontairement tolérant: il ne lève jamais. Chaque champ
absent ou invalide prend une valeur par défaut et son nom est ajouté à la
liste `defaulted` (observabilité).
"""
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from .models import CartLine, CheckoutIntent, OrderType

logger = logging.getLogger(__name__)

# Limite Stripe: 500 caractères par valeur de metadata
METADATA_VALUE_LIMIT = 500

# module rasvia_backend.payments.metadata
# Au-delà, quantize(CENTS) dépasse la précision du contexte décimal
MAX_PRICE = Decimal("1e15")
MAX_QUANTITY = 1_000_000

def _to_int(value: Any) -> Optional[int]:
    """Entier, y compris 2.0 ou "2.0"; None si absent, fractionnaire ou invalide."""
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite() or d != d.to_integral_value():
        return None
    return int(d)

def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite() or abs(d) >= MAX_PRICE:
        return None
    return d

def _decode_cart_line(raw: Dict[str, Any], index: int, defaulted: List[str]) -> CartLine:
    """
    Convertit une ligne brute {name, price, quantity, menu_item_id, is_vegetarian, added_by}.
    - price invalide ou hors bornes -> 0
    - quantity absente/invalide/hors bornes -> 1, quantity négative -> 0
    - quantity 2.0 est acceptée comme 2
    """
    price = _to_decimal(raw.get("price"))
    if price is None:
        price = Decimal("0")
        defaulted.append(f"cart_items[{index}].price")

    quantity = _to_int(raw.get("quantity"))
    if quantity is None:
        quantity = 1
        if raw.get("quantity") is not None:
            defaulted.append(f"cart_items[{index}].quantity")
    elif quantity < 0:
        quantity = 0
        defaulted.append(f"cart_items[{index}].quantity")
    elif quantity >= MAX_QUANTITY:
        quantity = 1
        defaulted.append(f"cart_items[{index}].quantity")

    return CartLine(
        menu_item_id=_to_int(raw.get("menu_item_id")) or None,
        name=str(raw.get("name") or ""),
        price=price,
        quantity=quantity,
        is_vegetarian=bool(raw.get("is_vegetarian") or False),
        added_by=str(raw.get("added_by") or ""),
    )

def decode_cart_items(cart_json: Optional[str], defaulted: List[str]) -> List[CartLine]:
    """
    Parse le JSON du panier. JSON malformé ou non-liste -> panier vide.
    Les entrées qui ne sont pas des objets sont ignorées.
    """
    if not cart_json:
        defaulted.append("cart_items")
        return []
    try:
        raw_items = json.loads(cart_json)
    except (TypeError, ValueError):
        defaulted.append("cart_items")
        return []
    if not isinstance(raw_items, list):
        defaulted.append("cart_items")
        return []

    lines: List[CartLine] = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            defaulted.append(f"cart_items[{index}]")
            continue
        lines.append(_decode_cart_line(raw, index, defaulted))
    return lines

def decode_checkout_intent(metadata: Optional[Dict[str, Any]]) -> Tuple[CheckoutIntent, List[str]]:
    """
    Construit un CheckoutIntent à partir de session["metadata"].
    - restaurant_id absent/invalide -> 0 (pas de restaurant)
    - user_id / customer_name absents -> ""
    - restaurant_name absent -> "Restaurant"
    - order_type absent/inconnu -> dine_in
    - cart_items malformé -> []
    Retour: (intent, defaulted) où defaulted liste les champs remplacés.
    Ne lève jamais.
    """
    meta = metadata if isinstance(metadata, dict) else {}
    defaulted: List[str] = []

    restaurant_id = _to_int(meta.get("restaurant_id"))
    if not restaurant_id:
        restaurant_id = 0
        defaulted.append("restaurant_id")

    restaurant_name = str(meta.get("restaurant_name") or "")
    if not restaurant_name:
        restaurant_name = "Restaurant"
        defaulted.append("restaurant_name")

    raw_order_type = str(meta.get("order_type") or "")
    try:
        order_type = OrderType(raw_order_type)
    except ValueError:
        order_type = OrderType.DINE_IN
        defaulted.append("order_type")

    for key in ("user_id", "customer_name", "party_session_id"):
        if not meta.get(key):
            defaulted.append(key)

    intent = CheckoutIntent(
        restaurant_id=restaurant_id,
        restaurant_name=restaurant_name,
        user_id=str(meta.get("user_id") or ""),
        customer_name=str(meta.get("customer_name") or ""),
        order_type=order_type,
        cart_items=decode_cart_items(meta.get("cart_items"), defaulted),
        party_session_id=str(meta.get("party_session_id") or ""),
    )
    return intent, defaulted

def _simplify_cart_line(item: Dict[str, Any]) -> Dict[str, Any]:
    quantity = item.get("quantity")
    return {
        "name": str(item.get("name") or "")[:40],
        "price": item.get("price"),
        "quantity": 1 if quantity is None else quantity,
        "menu_item_id": item.get("menu_item_id"),
        "is_vegetarian": bool(item.get("is_vegetarian") or False),
        "added_by": str(item.get("added_by") or "")[:20],
    }

def encode_cart_items(cart_items: Optional[List[Dict[str, Any]]]) -> str:
    """
    Sérialise le panier pour la metadata Stripe (valeur ≤ 500 caractères).
    - Format complet {name, price, quantity, menu_item_id, is_vegetarian, added_by}
    - Si trop long: format minimal {name, price, quantity, menu_item_id}, tronqué à 500.
      Un JSON tronqué sera décodé comme un panier vide au retour.
    """
    simplified = [_simplify_cart_line(i) for i in (cart_items or []) if isinstance(i, dict)]
    cart_json = json.dumps(simplified, separators=(",", ":"), default=str)
    if len(cart_json) <= METADATA_VALUE_LIMIT:
        return cart_json
    minimal = [
        {k: i[k] for k in ("name", "price", "quantity", "menu_item_id")}
        for i in simplified
    ]
    logger.warning("payments.metadata.encode_cart_items truncated items=%s", len(simplified))
    return json.dumps(minimal, separators=(",", ":"), default=str)[:METADATA_VALUE_LIMIT]

def make_metadata(
    *,
    restaurant_id: Any,
    restaurant_name: Optional[str] = None,
    customer_name: Optional[str] = None,
    user_id: Optional[str] = None,
    order_type: Optional[str] = None,
    party_session_id: Optional[str] = None,
    cart_items: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, str]:
    """
    Construit la metadata attachée à la session Checkout, relue par
    decode_checkout_intent au retour de Stripe.
    """
    return {
        "party_session_id": party_session_id or "",
        "restaurant_id": "" if restaurant_id is None else str(restaurant_id),
        "restaurant_name": (restaurant_name or "")[:100],
        "customer_name": (customer_name or "")[:100],
        "user_id": user_id or "",
        "order_type": order_type or OrderType.DINE_IN.value,
        "cart_items": encode_cart_items(cart_items),
    }
