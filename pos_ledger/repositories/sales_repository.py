# ==============================================================================
# REPOSITORIO DE VENTAS
# ==============================================================================
# Encapsula todo el acceso a sales.json
# Las ventas se guardan como lista, la más reciente primero.
# ==============================================================================

from typing import Any, Dict, List, Optional

from pos_ledger.repositories.base import ListRepository


class SalesRepository(ListRepository):
    """
    Formato de sales.json (ver FinalizedSale.to_dict):
    [
        {
            "id": "9f1c...",
            "invoice_number": "INV-1735725600000",
            "timestamp": "2025-01-01T10:00:00+00:00",
            "customer": "Walk-in Customer",
            "lines": [...],
            "subtotal": 89.97, "discount": 0.0, "tax": 0.0, "total": 89.97,
            "payment_method": "CASH",
            "status": "COMPLETED",
            "staff": {"name": "...", "email": "..."},
            "terminal_id": "caja-1"
        }
    ]
    """

    FILE_NAME = 'sales.json'

    def load(self) -> List[Dict[str, Any]]:
        return self.get_all()

    def get_by_invoice(self, invoice_number: str) -> Optional[Dict[str, Any]]:
        return self.find_by('invoice_number', invoice_number)

    def create_sale(self, sale_data: Dict[str, Any]) -> str:
        self.prepend(sale_data)
        return sale_data.get('invoice_number', '')

    def update_sale(self, invoice_number: str, updates: Dict[str, Any]) -> bool:
        return self.update_where('invoice_number', invoice_number, updates)

    def get_sales_by_status(self, status: str) -> List[Dict[str, Any]]:
        return self.find_all_by('status', status)
