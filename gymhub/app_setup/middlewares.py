"""
Middlewares transverses de l'application.
- register_basic_middlewares: session, CORS, TrustedHost et confiance en X-Forwarded-*.
- register_security_middleware: en-têtes de sécurité et CSP (Stripe Connect embarqué).
- register_no_cache_middleware: empêche la mise en cache des réponses de session Connect.
- register_force_https_middleware: force la redirection HTTPS (utile derrière proxy).
Notes:
- L'ordre d'ajout est important: le middleware HTTPS est ajouté en dernier pour s'exécuter en premier.
- Pas de CSRF: l'API est consommée en JSON avec un jeton Bearer.
"""
from fastapi import Request, FastAPI
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
from gymhub.config import SUPABASE_URL, COOKIE_SECURE, CORS_ORIGINS, ALLOWED_HOSTS, SESSION_SECRET_KEY

# Origines chargées par les composants Connect embarqués
STRIPE_SCRIPT_SOURCES = ["https://js.stripe.com", "https://connect-js.stripe.com"]
STRIPE_FRAME_SOURCES = ["https://js.stripe.com", "https://connect-js.stripe.com", "https://connect.stripe.com"]
STRIPE_CONNECT_SOURCES = ["https://api.stripe.com", "https://connect-js.stripe.com", "https://q.stripe.com"]
STRIPE_IMG_SOURCES = ["https://*.stripe.com"]
SWAGGER_CDNS = ["https://cdn.jsdelivr.net", "https://unpkg.com"]

def register_basic_middlewares(app: FastAPI) -> None:
    """
    Ajoute les middlewares « de base »:
    - SessionMiddleware: session basée sur cookie.
    - CORSMiddleware: autorise les origines définies (front du gérant).
    - TrustedHostMiddleware: limite les hôtes acceptés (défense host header).
    - ProxyHeadersMiddleware: fait confiance aux en-têtes du proxy (x-forwarded-*).
    """
    app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET_KEY)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )
    # Fait confiance aux en-têtes X-Forwarded-* (Render, Nginx, etc.)
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

def build_csp() -> str:
    csp_connect = ["'self'"]
    if SUPABASE_URL:
        csp_connect.append(SUPABASE_URL.rstrip("/"))
    csp_connect.extend(STRIPE_CONNECT_SOURCES)
    return (
        "default-src 'self'; "
        "base-uri 'self'; object-src 'none'; frame-ancestors 'none'; "
        f"img-src 'self' data: blob: {' '.join(STRIPE_IMG_SOURCES)} https://fastapi.tiangolo.com; "
        f"style-src 'self' 'unsafe-inline' {' '.join(SWAGGER_CDNS)}; "
        f"script-src 'self' 'unsafe-inline' {' '.join(STRIPE_SCRIPT_SOURCES + SWAGGER_CDNS)}; "
        f"frame-src {' '.join(STRIPE_FRAME_SOURCES)}; "
        f"connect-src {' '.join(csp_connect)}"
    )

def register_security_middleware(app: FastAPI) -> None:
    """
    En-têtes: X-Frame-Options, X-Content-Type-Options, Referrer-Policy, Permissions-Policy, HSTS (si secure).
    CSP: autorise les scripts, iframes et appels réseau de Stripe Connect, plus les CDNs de la doc Swagger.
    """
    csp = build_csp()

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
        if COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")
        response.headers["Content-Security-Policy"] = csp
        return response

def register_no_cache_middleware(app: FastAPI) -> None:
    """
    Le client_secret d'une session de compte ne doit jamais être mis en cache:
    s'applique aux réponses sous /api/v1/stripe et /functions/v1.
    """
    @app.middleware("http")
    async def no_cache_for_connect(request: Request, call_next):
        response = await call_next(request)
        path = request.url.path
        if path.startswith("/api/v1/stripe") or path.startswith("/functions/v1"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response

def register_force_https_middleware(app: FastAPI) -> None:
    """
    Force la redirection HTTP -> HTTPS lorsqu'un proxy place x-forwarded-proto=http.
    - Ajouté en dernier afin qu'il s'exécute en premier dans la pile des middlewares.
    """
    @app.middleware("http")
    async def force_https(request: Request, call_next):
        if request.headers.get("x-forwarded-proto") == "http":
            url = str(request.url.replace(scheme="https"))
            return RedirectResponse(url, status_code=301)
        return await call_next(request)
