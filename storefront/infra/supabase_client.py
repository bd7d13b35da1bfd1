"""
Clients Supabase de la boutique.
- anon: lecture publique et vérification des tokens (auth.get_user)
- service-role: webhook Stripe, actions admin, e-mails (bypass RLS)
- utilisateur: anon + JWT de l'appelant, RLS actif (adresses, historique)
Les secrets sont lus à la première utilisation: ConfigError s'ils manquent.
"""
from typing import Optional

from supabase import Client, create_client

from storefront import config

_anon_client: Optional[Client] = None
_service_client: Optional[Client] = None


def _build(key_setting: str) -> Client:
    return create_client(config.require_setting("SUPABASE_URL"), config.require_setting(key_setting))


def get_supabase() -> Client:
    global _anon_client
    if _anon_client is None:
        _anon_client = _build("SUPABASE_ANON")
    return _anon_client


def get_service_supabase() -> Client:
    global _service_client
    if _service_client is None:
        _service_client = _build("SUPABASE_SERVICE_KEY")
    return _service_client


def get_user_supabase(user_token: str) -> Client:
    """Nouveau client par requête: le JWT ne doit jamais rester sur une instance partagée."""
    if not user_token:
        raise ValueError("user_token is required")
    client = _build("SUPABASE_ANON")
    client.postgrest.auth(user_token)
    return client
