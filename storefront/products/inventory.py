"""
Décrément de stock après paiement.
La lecture puis l'écriture conditionnelle (quantity attendue) remplace une
écriture aveugle: un décrément concurrent fait échouer l'écriture, on relit
et on recommence, dans la limite de `attempts`.
"""
import logging

from storefront.products import repository

logger = logging.getLogger(__name__)

DECREMENTED = "decremented"
INSUFFICIENT = "insufficient"
NOT_FOUND = "not_found"
CONFLICT = "conflict"
FAILED = "failed"


def _try_decrement(product_id: str, quantity: int, attempts: int) -> str:
    for _ in range(max(1, attempts)):
        current = repository.get_product_quantity(product_id)
        if current is None:
            logger.warning("Produit %s introuvable, décrément de stock ignoré", product_id)
            return NOT_FOUND
        if current < quantity:
            logger.warning(
                "Insufficient inventory for product %s (stock=%s, achat=%s)", product_id, current, quantity
            )
            return INSUFFICIENT
        if repository.compare_and_set_quantity(product_id, current, current - quantity):
            return DECREMENTED
        logger.info("Stock du produit %s modifié entre lecture et écriture, nouvel essai", product_id)
    logger.warning("Décrément de stock abandonné pour %s après %s essais", product_id, attempts)
    return CONFLICT


def decrement_stock(product_id: str, quantity: int, attempts: int = 3) -> str:
    """
    Retire `quantity` du stock du produit si le stock le permet.
    Retourne l'un de DECREMENTED, INSUFFICIENT, NOT_FOUND, CONFLICT, FAILED.
    Le stock ne devient jamais négatif. Une erreur Supabase est journalisée (FAILED):
    la commande est déjà enregistrée, l'événement ne doit pas échouer pour autant.
    """
    try:
        return _try_decrement(product_id, quantity, attempts)
    except Exception:
        logger.exception("products.inventory.decrement_stock failed product_id=%s", product_id)
        return FAILED
