import logging

from storefront.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Niveau des loggers 'storefront.*' (LOG_LEVEL). Handler racine ajouté seulement s'il n'en existe aucun."""
    resolved = getattr(logging, str(level).upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("storefront").setLevel(resolved)
