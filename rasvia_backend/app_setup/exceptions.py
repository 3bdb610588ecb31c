"""
Gestionnaires d'exceptions.
- HTTPException: body JSON FastAPI standard {"detail": ...}.
- PaymentError (Stripe injoignable à la création du checkout): 502 JSON.
La page /payment-redirect ne lève jamais: son workflow convertit toute
erreur en outcome.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from rasvia_backend.payments.errors import PaymentError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_json(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))

    @app.exception_handler(PaymentError)
    async def payment_error_json(request: Request, exc: PaymentError):
        logger.warning("app.payment_error path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})
