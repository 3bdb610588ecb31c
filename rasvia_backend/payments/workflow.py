"""
Contrôleur du retour Stripe (/payment-redirect).

Séquence: status -> (cancel | success + session_id | autre)
          success: vérification Stripe -> décodage metadata -> matérialisation
Ne lève jamais: toute exception devient l'outcome Error.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from . import metadata as meta
from .outcomes import Outcome, OutcomeFactory
from .service import OrderMaterializer, verify_checkout_session

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_CANCEL = "cancel"


class PaymentRedirectWorkflow:
    """
    Dépendances explicites (injectées par rasvia_backend.payments.dependencies):
    - provider: retrieve_session(session_id) -> CheckoutSession
    - store: create_order / create_order_items / update_party_session / create_group_order_summary
    - now: horloge (UTC) pour les horodatages submitted_at/created_at
    """

    def __init__(
        self,
        provider,
        store,
        *,
        outcomes: Optional[OutcomeFactory] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.provider = provider
        self.materializer = OrderMaterializer(store, now=now)
        self.outcomes = outcomes or OutcomeFactory()

    def handle(self, status: Optional[str], session_id: Optional[str]) -> Outcome:
        if status == STATUS_CANCEL:
            logger.info("payments.workflow cancelled")
            return self.outcomes.cancelled()

        if status == STATUS_SUCCESS and session_id:
            try:
                return self._complete_checkout(session_id)
            except Exception as e:
                logger.exception("payments.workflow failed session_id=%s", session_id)
                return self.outcomes.error(str(e))

        logger.info("payments.workflow unknown status=%r has_session=%s", status, bool(session_id))
        return self.outcomes.unknown_redirect()

    def _complete_checkout(self, session_id: str) -> Outcome:
        session = verify_checkout_session(self.provider, session_id)
        if not session.is_paid:
            return self.outcomes.payment_incomplete()

        intent, defaulted = meta.decode_checkout_intent(session.metadata)
        if defaulted:
            logger.warning("payments.workflow metadata defaulted session_id=%s fields=%s", session_id, defaulted)

        # Pas de déduplication par session_id: un rechargement de la page
        # rejoue la matérialisation.
        result = self.materializer.materialize(intent)
        return self.outcomes.success(result)
