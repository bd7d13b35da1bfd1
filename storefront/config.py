# storefront.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du service storefront.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, Resend)
- Expose les constantes métier partagées (taux de taxe, devise, expéditeurs e-mail)
- require_setting(): échec immédiat (ConfigError) si un secret requis est absent
"""


class ConfigError(RuntimeError):
    """Secret ou paramètre obligatoire absent de l'environnement."""


def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")


# Supabase: URL et clés (anon / service-role)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("VITE_SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(
    os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_SERVICE_KEY") or ""
)

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Stripe: clé secrète et secret de signature du webhook
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
STRIPE_API_VERSION = os.getenv("STRIPE_API_VERSION", "2024-10-28.acacia")
CURRENCY = os.getenv("STORE_CURRENCY", "usd").lower()

# Resend (e-mails transactionnels)
RESEND_API_KEY = _clean_env(os.getenv("RESEND_API_KEY") or "")
RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
ORDERS_FROM_EMAIL = os.getenv("ORDERS_FROM_EMAIL", "Lord Smith Lamps <orders@lordsmithlamps.com>")
NOREPLY_FROM_EMAIL = os.getenv("NOREPLY_FROM_EMAIL", "Lord Smith Lamps <noreply@lordsmithlamps.com>")
CONTACT_INBOX = os.getenv("CONTACT_INBOX", "info@lordsmithlamps.com")

# URL publique du front (redirections Stripe)
APP_URL = _clean_env(os.getenv("APP_URL") or os.getenv("VITE_APP_URL") or "http://localhost:5173").rstrip("/")

# Taux de taxe fixe appliqué au sous-total (affichage panier et montants de session)
TAX_RATE = float(os.getenv("TAX_RATE", "0.095"))

# CORS / hôtes
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "*").split(",") if h.strip()]
# HSTS seulement derrière HTTPS
FORCE_HTTPS = (os.getenv("FORCE_HTTPS", "false").lower() == "true")

LOG_LEVEL = os.getenv("LOG_LEVEL", "info").upper()


def require_setting(name: str) -> str:
    """
    Retourne la valeur courante d'un paramètre module (ex: "STRIPE_SECRET_KEY").
    - Lit l'attribut du module à l'appel (les tests peuvent le monkeypatcher)
    - Soulève ConfigError si la valeur est vide
    """
    value = globals().get(name) or ""
    if not value:
        raise ConfigError(f"{name} is not configured")
    return value
