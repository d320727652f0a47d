"""
Factory d'application pour les entrypoints (gymhub.asgi, gymhub.__main__).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
import logging
import os
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import (
    register_basic_middlewares,
    register_security_middleware,
    register_no_cache_middleware,
    register_force_https_middleware,
)
from .exceptions import register_exception_handlers
from .routers import register_routers

def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "info").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      1) middlewares de base (session, CORS, TrustedHost, proxy)
      2) en-têtes de sécurité + CSP Stripe Connect, no-cache sur les réponses Connect
      3) gestionnaires d'exceptions
      4) tous les routers (fonctions, API v1, health)
      5) redirection HTTPS, ajoutée en dernier pour s'exécuter en premier
    """
    app = FastAPI(title="GymHub API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_no_cache_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    register_force_https_middleware(app)
    return app
