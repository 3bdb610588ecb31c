"""
Rendu de la page de redirection (HTML + deep link) à partir d'un Outcome.
Fonction pure: aucune E/S hormis la lecture du template Jinja2.
"""
from rasvia_backend.config import APP_DISPLAY_NAME, REDIRECT_DELAY_MS, REDIRECT_HINT_DELAY_MS
from rasvia_backend.utils.templates import templates

from .outcomes import Outcome

TEMPLATE_NAME = "payment_redirect.html"

# module rasvia_backend.payments.rendering
def render_outcome(
    outcome: Outcome,
    *,
    app_name: str = APP_DISPLAY_NAME,
    redirect_delay_ms: int = REDIRECT_DELAY_MS,
    hint_delay_ms: int = REDIRECT_HINT_DELAY_MS,
) -> str:
    """
    Produit la page HTML: titre, sous-titre, instructions éventuelles,
    numéro de commande, bouton vers outcome.deep_link et redirection
    automatique après redirect_delay_ms.
    """
    template = templates.get_template(TEMPLATE_NAME)
    return template.render(
        outcome=outcome,
        app_name=app_name,
        redirect_delay_ms=redirect_delay_ms,
        hint_delay_ms=hint_delay_ms,
    )
