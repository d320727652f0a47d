from urllib.parse import urlparse
import socket
from gymhub.config import SUPABASE_URL, STRIPE_SECRET_KEY, STRIPE_PUBLISHABLE_KEY
from gymhub.infra.supabase_client import get_supabase

HEALTH_TABLES = ("profiles", "members", "products")

def _check_table(client, name: str):
    try:
        res = client.table(name).select("id").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_supabase_info():
    parsed = urlparse(SUPABASE_URL) if SUPABASE_URL else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except Exception as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "supabase_url": SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = get_supabase()
        for t in HEALTH_TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(getattr(e, "detail", e))
    return info

def health_stripe_info():
    # Présence des clés uniquement: aucun appel réseau
    return {
        "secret_key": bool(STRIPE_SECRET_KEY),
        "publishable_key": bool(STRIPE_PUBLISHABLE_KEY),
        "live_mode": STRIPE_SECRET_KEY.startswith("sk_live_"),
    }
