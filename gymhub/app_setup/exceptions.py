"""
Gestionnaires d'exceptions.
- HTTPException: corps JSON standard {"detail": ...}.
- FormValidationError non interceptée par une vue: 400 {"detail": message}.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from gymhub.validation.forms import FormValidationError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))

    @app.exception_handler(FormValidationError)
    async def form_validation_handler(request: Request, exc: FormValidationError):
        logger.info("Saisie refusée sur %s: %s", request.url.path, exc)
        return JSONResponse(status_code=400, content={"detail": str(exc)})
