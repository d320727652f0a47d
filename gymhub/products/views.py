# module gymhub.products.views

"""Endpoints du catalogue.
- POST /functions/v1/create-product: création Stripe + base -> {success, product} ou 400 {error}.
- GET /api/v1/products: liste (filtre type optionnel).
- POST /api/v1/products/{id}/toggle: active/désactive un produit.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from gymhub.connect.views import functions_router
from gymhub.products import service as products_service
from gymhub.products.models import ProductCreate, first_error_message
from gymhub.utils.rate_limit import optional_rate_limit
from gymhub.utils.security import require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/products", tags=["Products API"])


@functions_router.post("/create-product", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_product_function(request: Request, user: Dict[str, Any] = Depends(require_user)):
    """Crée un produit pour la salle du gérant connecté.
    - Validation (prix, devise, période de facturation) avant tout appel réseau.
    - 200: {success: true, product}; 400: {error}
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"error": "Corps JSON invalide"}, status_code=400)
    try:
        data = ProductCreate.model_validate(body or {})
    except ValidationError as e:
        return JSONResponse({"error": first_error_message(e)}, status_code=400)

    try:
        product = await run_in_threadpool(products_service.create_product, user.get("id"), data)
    except Exception as e:
        logger.exception("Erreur create_product_function")
        return JSONResponse({"error": str(e)}, status_code=400)
    return {"success": True, "product": product}


@router.get("")
def list_products(
    type: Optional[str] = Query(default=None, pattern="^(membership|service|product)$"),
    user: Dict[str, Any] = Depends(require_user),
):
    try:
        return {"products": products_service.list_products(user.get("id"), user.get("token"), type)}
    except Exception:
        logger.exception("Erreur list_products")
        raise HTTPException(status_code=500, detail="Impossible de charger les produits")


@router.post("/{product_id}/toggle")
def toggle_product(product_id: str, user: Dict[str, Any] = Depends(require_user)):
    try:
        product = products_service.toggle_product_status(product_id, user.get("id"), user.get("token"))
    except Exception:
        logger.exception("Erreur toggle_product id=%s", product_id)
        raise HTTPException(status_code=500, detail="Impossible de modifier le produit")
    if not product:
        raise HTTPException(status_code=404, detail="Produit introuvable")
    return {"product": product}
