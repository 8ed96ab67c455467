# ==============================================================================
# SERVICIO DE AUDITORÍA
# ==============================================================================
# Centraliza el registro de eventos de caja y catálogo con mensajes legibles.
# ==============================================================================

from typing import Any, Dict, List, Optional

from pos_ledger.models import AuditType, FinalizedSale, Product
from pos_ledger.repositories.interfaces import IAuditRepository


class AuditService:
    """
    Servicio para registro y consulta de auditoría.

    Regla: todo cobro, anulación de carrito, cambio de estado de venta,
    alta o edición de producto y ajuste de stock deja un registro.
    """

    def __init__(self, audit_repo: IAuditRepository):
        self.audit_repo = audit_repo

    # =========================================================================
    # REGISTRO DE EVENTOS
    # =========================================================================

    def log(
        self,
        log_type: AuditType,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        self.audit_repo.log(log_type.value, user, message, related_id, details or {})

    def log_sale_recorded(self, sale: FinalizedSale) -> None:
        user = sale.staff.name
        message = (
            f"Venta {sale.invoice_number} registrada por {user} - "
            f"Total: $ {sale.total:.2f} - {sale.item_count} ítems - "
            f"{sale.payment_method.value}"
        )
        self.log(
            AuditType.SALE,
            user,
            message,
            sale.invoice_number,
            {
                'total': float(sale.total),
                'items_count': sale.item_count,
                'payment_method': sale.payment_method.value,
                'terminal_id': sale.terminal_id,
            }
        )

    def log_sale_status_change(
        self,
        user: str,
        invoice_number: str,
        old_status: str,
        new_status: str
    ) -> None:
        message = f"Venta {invoice_number}: {old_status} → {new_status} por {user}"
        self.log(
            AuditType.SALE,
            user,
            message,
            invoice_number,
            {'from': old_status, 'to': new_status}
        )

    def log_cart_cancelled(self, user: str, terminal_id: str, lines_count: int) -> None:
        message = f"Carrito de la caja {terminal_id} cancelado por {user} ({lines_count} líneas)"
        self.log(AuditType.CART, user, message, terminal_id, {'lines_count': lines_count})

    def log_product_created(self, user: str, product: Product) -> None:
        message = f"Producto {product.id} ({product.name}) creado por {user}"
        self.log(
            AuditType.PRODUCT,
            user,
            message,
            product.id,
            {'price': float(product.price), 'stock': product.stock, 'barcode': product.barcode}
        )

    def log_product_updated(self, user: str, product: Product, changes: Dict[str, Any]) -> None:
        fields = ", ".join(sorted(changes))
        message = f"Producto {product.id} ({product.name}) actualizado por {user}: {fields}"
        self.log(AuditType.PRODUCT, user, message, product.id, {'changes': changes})

    def log_stock_adjusted(
        self,
        user: str,
        product: Product,
        adjustment: int,
        old_stock: int,
        reason: str = ''
    ) -> None:
        sign = '+' if adjustment > 0 else ''
        message = (
            f"Stock de {product.name} ajustado {sign}{adjustment} por {user} "
            f"({old_stock} → {product.stock})"
        )
        if reason:
            message += f" - {reason}"
        self.log(
            AuditType.STOCK,
            user,
            message,
            product.id,
            {
                'adjustment': adjustment,
                'old_stock': old_stock,
                'new_stock': product.stock,
                'reason': reason,
            }
        )

    def log_handoff_failure(
        self,
        terminal_id: str,
        invoice_number: str,
        handler: str,
        error: str
    ) -> None:
        """Venta cobrada cuyo registro falló (el carrito ya se vació)."""
        message = f"Venta {invoice_number} cobrada en caja {terminal_id} sin registrar: {error}"
        self.log(
            AuditType.SYSTEM,
            'sistema',
            message,
            invoice_number,
            {'terminal_id': terminal_id, 'handler': handler, 'error': error}
        )

    # =========================================================================
    # CONSULTA
    # =========================================================================

    def get_logs(
        self,
        log_type: Optional[AuditType] = None,
        related_id: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        logs = self.audit_repo.load()
        if log_type is not None:
            logs = [entry for entry in logs if entry.get('type') == log_type.value]
        if related_id is not None:
            logs = [entry for entry in logs if entry.get('related_id') == related_id]
        if limit is not None:
            logs = logs[:max(limit, 0)]
        return logs
