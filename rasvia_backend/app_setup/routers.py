"""
Registre central des routers.
- Web: page de retour Stripe (/payment-redirect)
- API v1: création de session Checkout
- Health: /health, /health/supabase
"""
from fastapi import FastAPI
from rasvia_backend.payments import views as payments_views
from rasvia_backend.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(payments_views.router)
    app.include_router(payments_views.api_router)
    app.include_router(health_router)
