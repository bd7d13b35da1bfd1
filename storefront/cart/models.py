"""
Panier en mémoire (non autoritatif).
Sert à l'affichage et à construire la requête de checkout; les montants
réellement facturés sont recalculés côté serveur.
"""
from typing import Any, Dict, List, Optional

from storefront.config import TAX_RATE
from . import pricing


class CartItem:
    def __init__(self, product: Dict[str, Any], cart_quantity: int = 1):
        self.product = dict(product)
        self.cart_quantity = cart_quantity

    @property
    def product_id(self) -> str:
        return str(self.product.get("id") or "")

    @property
    def stock(self) -> int:
        # Stock connu au moment de l'ajout (peut être périmé au checkout)
        return int(self.product.get("quantity") or 0)

    @property
    def line_total(self) -> float:
        return pricing.to_money(pricing.amount_from(self.product.get("price")) * self.cart_quantity)

    def as_line(self) -> pricing.Line:
        return self.product, self.cart_quantity


class Cart:
    """
    Liste de CartItem indexée par id produit.
    - add(): insère (quantité 1) ou incrémente, plafonné au stock connu
    - update_quantity(): 0 supprime la ligne, sinon plafonne au stock
    - Les dépassements de stock sont ignorés silencieusement
    """

    def __init__(self, tax_rate: float = TAX_RATE):
        self.tax_rate = tax_rate
        self._items: Dict[str, CartItem] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, product_id: object) -> bool:
        return str(product_id) in self._items

    @property
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    def get(self, product_id: str) -> Optional[CartItem]:
        return self._items.get(str(product_id))

    def add(self, product: Dict[str, Any]) -> None:
        product_id = str(product.get("id") or "")
        if not product_id:
            return
        existing = self._items.get(product_id)
        if existing:
            new_quantity = existing.cart_quantity + 1
            if new_quantity > int(product.get("quantity") or 0):
                return
            existing.cart_quantity = new_quantity
            return
        if int(product.get("quantity") or 0) < 1:
            return
        self._items[product_id] = CartItem(product, 1)

    def update_quantity(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove(product_id)
            return
        item = self._items.get(str(product_id))
        if item:
            item.cart_quantity = min(quantity, item.stock)

    def remove(self, product_id: str) -> None:
        self._items.pop(str(product_id), None)

    def clear(self) -> None:
        self._items.clear()

    # Valeurs dérivées (affichage)
    @property
    def subtotal(self) -> float:
        return pricing.compute_subtotal(i.as_line() for i in self.items)

    @property
    def shipping(self) -> float:
        return pricing.compute_shipping(i.as_line() for i in self.items)

    @property
    def tax(self) -> float:
        return pricing.compute_tax(self.subtotal, self.tax_rate)

    @property
    def total(self) -> float:
        return pricing.to_money(self.subtotal + self.shipping + self.tax)

    @property
    def total_items(self) -> int:
        return sum(i.cart_quantity for i in self.items)

    def to_checkout_payload(self, shipping_address_id: Optional[str] = None) -> Dict[str, Any]:
        """Corps JSON attendu par POST /api/v1/payments/checkout-session."""
        payload: Dict[str, Any] = {
            "cart_items": [
                {"product_id": i.product_id, "quantity": i.cart_quantity} for i in self.items
            ]
        }
        if shipping_address_id:
            payload["shipping_address_id"] = shipping_address_id
        return payload
