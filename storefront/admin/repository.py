from typing import Optional
import logging

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)


# module storefront.admin.repository
def count_table_rows(table_name: str, filters: Optional[dict] = None) -> int:
    """
    Compte les lignes d'une table via Supabase (service-role).
    Utilise count='exact' si disponible, sinon len(data). 0 en cas d'erreur.
    """
    try:
        query = supabase_client.get_service_supabase().table(table_name).select("id", count="exact")
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        res = query.execute()
        if getattr(res, "count", None) is not None:
            return int(res.count)
        return len(res.data or [])
    except Exception:
        logger.exception("admin.repository.count_table_rows failed table=%s", table_name)
        return 0


def count_active_subscriptions() -> int:
    return count_table_rows("newsletter_subscriptions", {"is_active": True})
