# gymhub.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Charger le .env à la racine du projet de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du backend GymHub.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, Stripe Connect)
- Expose la sécurité cookies, CORS/hosts et les URLs de redirection d'onboarding
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces, guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

# Supabase: URL et clés (anon / service-role)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("VITE_SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(
    os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_SERVICE_KEY") or ""
)

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Fonctions serverless (par défaut: celles du projet Supabase)
FUNCTIONS_URL = _clean_env(os.getenv("FUNCTIONS_URL") or (f"{SUPABASE_URL}/functions/v1" if SUPABASE_URL else ""))
FUNCTIONS_TIMEOUT = float(os.getenv("FUNCTIONS_TIMEOUT", "15"))

# Stripe: clé secrète (serveur) et clé publiable (Connect embarqué)
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_PUBLISHABLE_KEY = _clean_env(
    os.getenv("STRIPE_PUBLISHABLE_KEY") or os.getenv("VITE_STRIPE_PUBLISHABLE_KEY") or ""
)
STRIPE_API_VERSION = _clean_env(os.getenv("STRIPE_API_VERSION") or "2023-10-16")

# Cookies / sécurité
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "replace_me_with_a_long_random_secret")

# CORS (dev) et hôtes autorisés
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000")
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or BASE_URL)

# Onboarding Stripe Connect: retour et rafraîchissement du lien
CONNECT_RETURN_URL = _clean_env(os.getenv("CONNECT_RETURN_URL") or f"{FRONTEND_URL}/onboard-stripe?status=return")
CONNECT_REFRESH_URL = _clean_env(os.getenv("CONNECT_REFRESH_URL") or f"{FRONTEND_URL}/onboard-stripe?status=refresh")
# Secret partagé du webhook d'inscription (Authorization: Bearer <secret>)
CONNECT_WEBHOOK_SECRET = _clean_env(os.getenv("CONNECT_WEBHOOK_SECRET") or "")
# Source des données de session Connect: "service" (en processus) ou "functions" (HTTP)
CONNECT_SESSION_SOURCE = (os.getenv("CONNECT_SESSION_SOURCE") or "service").strip().lower()

# Inscription: redirection après confirmation de l'email
SIGNUP_REDIRECT_URL = os.getenv("SIGNUP_REDIRECT_URL", f"{FRONTEND_URL}/auth")
