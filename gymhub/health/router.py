from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from gymhub.health import service as health_service
from gymhub.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root(request: Request):
    registry = getattr(request.app.state, "connect_sessions", None)
    return {
        "ok": True,
        "rate_limit": rate_limit_health_info(request),
        "connect_sessions": len(registry) if registry is not None else 0,
    }

@router.get("/supabase")
def health_supabase():
    return JSONResponse(health_service.health_supabase_info())

@router.get("/stripe")
def health_stripe():
    return health_service.health_stripe_info()
