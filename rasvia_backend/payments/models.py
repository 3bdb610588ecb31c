"""
Types du flux de paiement: session Stripe, intention de commande décodée,
résultats d'écriture et de matérialisation.
"""
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

CENTS = Decimal("0.01")


class OrderType(str, Enum):
    DINE_IN = "dine_in"
    TAKEOUT = "takeout"


class OrderStatus(str, Enum):
    ACTIVE = "active"
    PREPARING = "preparing"


class PartySessionStatus(str, Enum):
    SUBMITTED = "submitted"


class CheckoutSession(BaseModel):
    """Vue minimale d'une session Stripe Checkout: statut de paiement + metadata."""
    id: str
    payment_status: str = ""
    metadata: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


class CartLine(BaseModel):
    menu_item_id: Optional[int] = None
    name: str = ""
    price: Decimal = Decimal("0")
    quantity: int = 1
    is_vegetarian: bool = False
    added_by: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class CheckoutIntent(BaseModel):
    """
    Intention de commande décodée depuis la metadata Stripe.
    restaurant_id == 0 signifie « pas de restaurant ».
    """
    restaurant_id: int = 0
    restaurant_name: str = "Restaurant"
    user_id: str = ""
    customer_name: str = ""
    order_type: OrderType = OrderType.DINE_IN
    cart_items: List[CartLine] = Field(default_factory=list)
    party_session_id: str = ""

    @property
    def subtotal(self) -> Decimal:
        total = sum((line.line_total for line in self.cart_items), Decimal("0"))
        return total.quantize(CENTS, rounding=ROUND_HALF_UP)

    @property
    def can_materialize(self) -> bool:
        return bool(self.restaurant_id) and len(self.cart_items) > 0


class WriteResult(BaseModel):
    operation: str
    ok: bool
    error: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class MaterializationResult(BaseModel):
    """
    Résultat agrégé de la matérialisation, utilisé pour construire l'outcome.
    order_id est None si aucune commande n'a été créée (panier vide, pas de
    restaurant ou échec d'écriture).
    """
    order_id: Optional[str] = None
    subtotal: Decimal = Decimal("0.00")
    restaurant_name: str = "Restaurant"
    order_type: OrderType = OrderType.DINE_IN
    party_session_id: Optional[str] = None
    writes: List[WriteResult] = Field(default_factory=list)

    @property
    def failed_writes(self) -> List[WriteResult]:
        return [w for w in self.writes if not w.ok]

    @property
    def formatted_total(self) -> str:
        return f"{self.subtotal:.2f}"
