"""
Accès aux données pour la feature 'payments' (Supabase, tables orders,
order_items, party_sessions, group_orders).

Chaque opération lève StoreWriteFailed en cas d'échec; c'est le
materializer qui décide de la suite (best-effort, non transactionnel).
"""
import logging
from typing import Any, Callable, Dict, List

from supabase import Client

import rasvia_backend.infra.supabase_client as supabase_client

from .errors import StoreWriteFailed

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"
ORDER_ITEMS_TABLE = "order_items"
PARTY_SESSIONS_TABLE = "party_sessions"
GROUP_ORDERS_TABLE = "group_orders"

# module rasvia_backend.payments.repository
def _first_row(data: Any) -> Dict[str, Any]:
    if isinstance(data, list):
        return data[0] if data else {}
    return data or {}


class SupabaseOrderStore:
    """
    Magasin persistant des commandes. client_factory est appelé à chaque
    opération (par défaut le client service-role, bypass RLS).
    """

    def __init__(self, client_factory: Callable[[], Client] = None):
        self._client_factory = client_factory or supabase_client.get_service_supabase

    def _client(self, operation: str) -> Client:
        try:
            return self._client_factory()
        except Exception as e:
            logger.exception("payments.repository.%s client unavailable", operation)
            raise StoreWriteFailed(operation, str(e)) from e

    def create_order(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insère une commande et retourne la ligne créée (avec son id).
        """
        client = self._client("create_order")
        try:
            res = client.table(ORDERS_TABLE).insert(row).execute()
        except Exception as e:
            logger.exception("payments.repository.create_order failed restaurant_id=%s", row.get("restaurant_id"))
            raise StoreWriteFailed("create_order", str(e)) from e
        created = _first_row(res.data)
        if created.get("id") is None:
            raise StoreWriteFailed("create_order", "no id returned")
        return created

    def create_order_items(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insère les lignes de commande en un seul batch."""
        client = self._client("create_order_items")
        try:
            res = client.table(ORDER_ITEMS_TABLE).insert(rows).execute()
        except Exception as e:
            order_id = rows[0].get("order_id") if rows else None
            logger.exception("payments.repository.create_order_items failed order_id=%s count=%s", order_id, len(rows))
            raise StoreWriteFailed("create_order_items", str(e)) from e
        return res.data or []

    def update_party_session(self, party_session_id: str, status: str, submitted_at: str) -> List[Dict[str, Any]]:
        """Passe la party session au statut donné (ex: submitted) avec l'horodatage."""
        client = self._client("update_party_session")
        try:
            res = (
                client.table(PARTY_SESSIONS_TABLE)
                .update({"status": status, "submitted_at": submitted_at})
                .eq("id", party_session_id)
                .execute()
            )
        except Exception as e:
            logger.exception("payments.repository.update_party_session failed party_session_id=%s", party_session_id)
            raise StoreWriteFailed("update_party_session", str(e)) from e
        return res.data or []

    def create_group_order_summary(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insère le snapshot group_orders d'une party session."""
        client = self._client("create_group_order_summary")
        try:
            res = client.table(GROUP_ORDERS_TABLE).insert(row).execute()
        except Exception as e:
            logger.exception(
                "payments.repository.create_group_order_summary failed party_session_id=%s",
                row.get("party_session_id"),
            )
            raise StoreWriteFailed("create_group_order_summary", str(e)) from e
        return _first_row(res.data)
