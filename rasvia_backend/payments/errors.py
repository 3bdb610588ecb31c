"""
Taxonomie des erreurs de la feature 'payments'.
"""


class PaymentError(Exception):
    """Erreur de base du flux de paiement."""


class ProviderUnavailable(PaymentError):
    """
    Stripe injoignable (réseau, authentification, session introuvable).
    Terminal: convertie en outcome Error par le workflow.
    """

    def __init__(self, message: str = "Payment provider unavailable"):
        super().__init__(message)


class StoreWriteFailed(PaymentError):
    """
    Échec d'une écriture Supabase. Jamais propagée hors du materializer:
    transformée en WriteResult(ok=False).
    """

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        super().__init__(f"{operation} failed" + (f": {message}" if message else ""))
