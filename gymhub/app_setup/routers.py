"""
Registre central des routers.
- Fonctions (contrat des fonctions serverless): get-stripe-account-info, create-connect-account, create-product
- API v1: auth, stripe (session embarquée), members, notes, products, dashboard
- Health: health_router
"""
from fastapi import FastAPI
from gymhub.auth.views import api_router as auth_api_router
from gymhub.connect import views as connect_views
from gymhub.products import views as products_views
from gymhub.members import views as members_views
from gymhub.notes import views as notes_views
from gymhub.dashboard import views as dashboard_views
from gymhub.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    - products_views est importé avant l'inclusion de functions_router: il y déclare /create-product.
    """
    # Fonctions
    app.include_router(connect_views.functions_router)
    # API v1
    app.include_router(auth_api_router)
    app.include_router(connect_views.router)
    app.include_router(members_views.router)
    app.include_router(notes_views.router)
    app.include_router(products_views.router)
    app.include_router(dashboard_views.router)
    # Health & monitoring
    app.include_router(health_router)
