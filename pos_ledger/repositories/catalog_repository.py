# ==============================================================================
# REPOSITORIO DE CATÁLOGO
# ==============================================================================
# Encapsula el acceso a catalog.json
# ==============================================================================

from typing import Any, Dict, Optional

from pos_ledger.repositories.base import DictRepository


class CatalogRepository(DictRepository):
    """
    Formato de catalog.json:
    {
        "1": {"id": "1", "name": "Wireless Mouse", "price": 29.99,
              "barcode": "1234567890123", "stock": 45, "category": ""}
    }
    """

    FILE_NAME = 'catalog.json'

    def load(self) -> Dict[str, Dict[str, Any]]:
        return self.get_all()

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        return self.get_by_id(product_id)

    def find_by_barcode(self, barcode: str) -> Optional[Dict[str, Any]]:
        for product in self.get_all().values():
            if product.get('barcode') == barcode:
                return product
        return None

    def save_product(self, product: Dict[str, Any]) -> None:
        self.update(product['id'], product)

    def next_id(self) -> str:
        """Siguiente id numérico libre ("7" si el mayor es "6")."""
        numeric = [int(pid) for pid in self.get_all() if str(pid).isdigit()]
        return str(max(numeric, default=0) + 1)
