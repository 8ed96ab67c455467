# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Las rutas (main.py) solo llaman a servicios
# 3. Los servicios dependen de interfaces de repositorio, no de JSON
#
# ESTRUCTURA:
# ├── cart_ledger.py       → Carrito de una caja (totales, cobro)
# ├── invoice_numbers.py   → Números de boleta únicos
# ├── terminal_service.py  → Un carrito por caja, escaneo, cobro
# ├── catalog_service.py   → Búsqueda de productos
# ├── sales_service.py     → Registro e historial de ventas
# ├── receipt_service.py   → Boletas en texto
# └── audit_service.py     → Logs de actividad
# ==============================================================================

from pos_ledger.services.cart_ledger import CartLedger, EmptyCartError
from pos_ledger.services.invoice_numbers import InvoiceNumberGenerator
from pos_ledger.services.audit_service import AuditService
from pos_ledger.services.catalog_service import CatalogService
from pos_ledger.services.sales_service import SalesService
from pos_ledger.services.receipt_service import ReceiptService
from pos_ledger.services.terminal_service import TerminalService

__all__ = [
    'CartLedger',
    'EmptyCartError',
    'InvoiceNumberGenerator',
    'AuditService',
    'CatalogService',
    'SalesService',
    'ReceiptService',
    'TerminalService',
]
