# ==============================================================================
# SERVICIO DE CAJAS (TERMINALES)
# ==============================================================================
# Cada caja tiene su propio CartLedger, creado en el primer uso y conectado
# al registro de ventas. Aquí vive la orquestación que la UI necesita:
# escanear, cobrar, cancelar y previsualizar la boleta.
# ==============================================================================

import logging
import threading
from typing import Any, Dict, List, Tuple

from pos_ledger.models import StaffIdentity
from pos_ledger.services.audit_service import AuditService
from pos_ledger.services.cart_ledger import CartLedger
from pos_ledger.services.catalog_service import CatalogService
from pos_ledger.services.invoice_numbers import InvoiceNumberGenerator
from pos_ledger.services.receipt_service import ReceiptService
from pos_ledger.services.sales_service import SalesService

logger = logging.getLogger(__name__)


class TerminalService:
    """
    Registro de carritos por caja.

    Responsabilidades:
    - Un CartLedger independiente por terminal_id
    - Escaneo: catálogo → línea del carrito
    - Cobro con aviso si la venta no se pudo registrar
    - Cancelación y vista previa de boleta
    """

    def __init__(
        self,
        catalog_service: CatalogService,
        sales_service: SalesService,
        receipt_service: ReceiptService,
        audit_service: AuditService = None,
        invoice_numbers: InvoiceNumberGenerator = None,
        default_staff: StaffIdentity = None
    ):
        self.catalog_service = catalog_service
        self.sales_service = sales_service
        self.receipt_service = receipt_service
        self.audit_service = audit_service
        self.invoice_numbers = invoice_numbers or InvoiceNumberGenerator()
        self.default_staff = default_staff
        self._ledgers: Dict[str, CartLedger] = {}
        self._lock = threading.Lock()

    # =========================================================================
    # CARRITOS
    # =========================================================================

    def get_ledger(self, terminal_id: str) -> CartLedger:
        with self._lock:
            ledger = self._ledgers.get(terminal_id)
            if ledger is None:
                ledger = CartLedger(
                    terminal_id=terminal_id,
                    handlers=[self.sales_service.record_sale],
                    invoice_numbers=self.invoice_numbers,
                )
                self._ledgers[terminal_id] = ledger
                logger.debug("[CAJA %s] Carrito creado", terminal_id)
            return ledger

    def terminals(self) -> List[str]:
        with self._lock:
            return list(self._ledgers)

    def view(self, terminal_id: str) -> Dict[str, Any]:
        return {'ok': True, 'carrito': self.get_ledger(terminal_id).to_dict()}

    # =========================================================================
    # ESCANEO
    # =========================================================================

    def scan(self, terminal_id: str, code: str, quantity: int = 1) -> Dict[str, Any]:
        """
        Agrega al carrito el producto del código escaneado.

        El stock no se valida (solo se informa en la respuesta). Una
        cantidad menor a 1 se rechaza sin tocar el carrito.

        Returns:
            Dict con ok/error, la línea resultante y el carrito
        """
        product = self.catalog_service.lookup(code)
        if product is None:
            return {'ok': False, 'error': f'Producto no encontrado: {code}', 'not_found': True}
        return self._add_product(terminal_id, product, quantity)

    def add_product(self, terminal_id: str, product_id: str, quantity: int = 1) -> Dict[str, Any]:
        """Click en el catálogo: se busca solo por id."""
        product = self.catalog_service.get_product(product_id)
        if product is None:
            return {'ok': False, 'error': f'Producto no encontrado: {product_id}', 'not_found': True}
        return self._add_product(terminal_id, product, quantity)

    def _add_product(self, terminal_id, product, quantity) -> Dict[str, Any]:
        if quantity < 1:
            return {'ok': False, 'error': f'Cantidad inválida: {quantity}'}
        ledger = self.get_ledger(terminal_id)
        line = ledger.add_line(product.id, product.name, product.price, quantity)
        return {
            'ok': True,
            'mensaje': 'Producto agregado al carrito',
            'producto': product.to_dict(),
            'linea': line.to_dict() if line else None,
            'carrito': ledger.to_dict(),
        }

    # =========================================================================
    # COBRO Y CANCELACIÓN
    # =========================================================================

    def checkout(self, terminal_id: str, staff: StaffIdentity = None) -> Dict[str, Any]:
        """
        Cobra el carrito de la caja.

        Raises:
            EmptyCartError: Si el carrito está vacío
        """
        ledger = self.get_ledger(terminal_id)
        sale = ledger.checkout(staff or self.default_staff)

        warnings = []
        for handler_name, error in ledger.last_handoff_failures:
            warnings.append(f'La venta se cobró pero no se pudo registrar: {error}')
            if self.audit_service:
                self._log_failure(terminal_id, sale.invoice_number, handler_name, error)

        return {
            'ok': True,
            'mensaje': f'Venta {sale.invoice_number} cobrada',
            'sale': sale,
            'warnings': warnings,
        }

    def _log_failure(self, terminal_id, invoice_number, handler_name, error) -> None:
        # El audit también puede estar caído (mismo disco): solo se deja en el log
        try:
            self.audit_service.log_handoff_failure(
                terminal_id, invoice_number, handler_name, str(error)
            )
        except OSError:
            logger.exception("[CAJA %s] No se pudo auditar la falla de %s", terminal_id, invoice_number)

    def cancel(self, terminal_id: str, user: str = '') -> Dict[str, Any]:
        ledger = self.get_ledger(terminal_id)
        lines_count = len(ledger.lines)
        ledger.cancel()
        if self.audit_service and lines_count:
            self.audit_service.log_cart_cancelled(user, terminal_id, lines_count)
        return {'ok': True, 'mensaje': 'Carrito vaciado', 'carrito': ledger.to_dict()}

    def preview_receipt(
        self,
        terminal_id: str,
        staff: StaffIdentity = None
    ) -> Tuple[Dict[str, Any], str]:
        """
        Boleta del carrito actual sin cobrar.

        Returns:
            (receipt, texto)

        Raises:
            EmptyCartError: Si el carrito está vacío
        """
        draft = self.get_ledger(terminal_id).draft_sale(staff or self.default_staff)
        receipt = self.receipt_service.build_receipt(draft)
        return receipt, self.receipt_service.render_text(receipt)
