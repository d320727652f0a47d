"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn -k uvicorn.workers.UvicornWorker) importe `gymhub.asgi:app`.
- Toute la configuration FastAPI est centralisée dans gymhub.app_setup.factory.
"""

from gymhub.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "gymhub.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
