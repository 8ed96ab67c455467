# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
# Los servicios dependen de estos protocolos, no de los archivos JSON.
# En tests se pueden reemplazar por objetos en memoria que los cumplan.
# ==============================================================================

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class ICatalogRepository(Protocol):
    """Catálogo de productos."""

    def load(self) -> Dict[str, Dict[str, Any]]:
        """Todos los productos {id: producto}."""
        ...

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        ...

    def find_by_barcode(self, barcode: str) -> Optional[Dict[str, Any]]:
        ...

    def save_product(self, product: Dict[str, Any]) -> None:
        ...

    def next_id(self) -> str:
        ...


@runtime_checkable
class ISalesRepository(Protocol):
    """Ventas finalizadas, la más reciente primero."""

    def load(self) -> List[Dict[str, Any]]:
        ...

    def get_by_invoice(self, invoice_number: str) -> Optional[Dict[str, Any]]:
        ...

    def create_sale(self, sale_data: Dict[str, Any]) -> str:
        """Guarda una venta, retorna su número de boleta."""
        ...

    def update_sale(self, invoice_number: str, updates: Dict[str, Any]) -> bool:
        ...

    def get_sales_by_status(self, status: str) -> List[Dict[str, Any]]:
        ...


@runtime_checkable
class IAuditRepository(Protocol):
    """Registro de auditoría."""

    def load(self) -> List[Dict[str, Any]]:
        ...

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str,
        details: Dict[str, Any]
    ) -> None:
        ...


@runtime_checkable
class ISettingsRepository(Protocol):
    """Configuración de la tienda."""

    def get_store_info(self) -> Dict[str, Any]:
        ...

    def set_store_info(self, store_info: Dict[str, Any]) -> None:
        ...
