"""
Accès aux données pour la table 'products' (client service-role).
"""
from typing import Any, Dict, Iterable, List, Optional
import logging

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

PRODUCT_PRICING_COLUMNS = "id, name, price, shipping_price"


# module storefront.products.repository
def fetch_products_by_ids(ids: List[str], columns: str = PRODUCT_PRICING_COLUMNS) -> List[dict]:
    """
    Récupère les produits par leurs IDs.
    - Retourne [] si ids vide.
    - Propage l'erreur Supabase (chemin critique du paiement: pas de prix « par défaut »).
    """
    if not ids:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("products")
            .select(columns)
            .in_("id", [str(i) for i in ids])
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("products.repository.fetch_products_by_ids failed ids=%s", ids)
        raise


def get_products_map(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Retourne un dict {id: produit} à partir d'une liste d'IDs."""
    products = fetch_products_by_ids(list(ids))
    return {str(p.get("id")): p for p in products}


def get_product_quantity(product_id: str) -> Optional[int]:
    """Stock courant d'un produit, None si introuvable."""
    res = (
        supabase_client.get_service_supabase()
        .table("products")
        .select("quantity")
        .eq("id", product_id)
        .maybe_single()
        .execute()
    )
    row = getattr(res, "data", None) if res is not None else None
    if not row:
        return None
    return int(row.get("quantity") or 0)


def compare_and_set_quantity(product_id: str, expected: int, new_quantity: int) -> bool:
    """
    Écrit quantity=new_quantity seulement si la valeur stockée vaut encore `expected`.
    Retourne True si une ligne a été modifiée.
    """
    res = (
        supabase_client.get_service_supabase()
        .table("products")
        .update({"quantity": new_quantity})
        .eq("id", product_id)
        .eq("quantity", expected)
        .execute()
    )
    return bool(getattr(res, "data", None))
