"""
ASGI entrypoint: expose `app` pour les process managers / déploiements
(ex: uvicorn rasvia_backend.asgi:app).
"""

from rasvia_backend.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "rasvia_backend.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
