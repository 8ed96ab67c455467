# ==============================================================================
# SERVICIO DE VENTAS
# ==============================================================================
# Registro e historial de ventas finalizadas.
# record_sale es el handler de persistencia que recibe cada cobro de caja.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from pos_ledger.models import FinalizedSale, SaleStatus
from pos_ledger.repositories.interfaces import ISalesRepository
from pos_ledger.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class SalesService:
    """
    Servicio para gestión de ventas.

    Responsabilidades:
    - Guardar las ventas cobradas en caja
    - Historial (más reciente primero) y búsqueda por boleta
    - Cambios de estado posteriores (ej: devolución)
    """

    def __init__(
        self,
        sales_repo: ISalesRepository,
        audit_service: AuditService = None
    ):
        """
        Args:
            sales_repo: Repositorio de ventas
            audit_service: Servicio de auditoría (opcional)
        """
        self.sales_repo = sales_repo
        self.audit_service = audit_service

    # =========================================================================
    # REGISTRO
    # =========================================================================

    def record_sale(self, sale: FinalizedSale) -> str:
        """
        Guarda una venta cobrada.

        Si falla la escritura de la venta el error se propaga: quien llama
        (la caja) lo registra, no se reintenta. Si la venta quedó guardada
        y solo falla la auditoría, se deja en el log y la venta cuenta como
        registrada.

        Returns:
            Número de boleta guardado
        """
        invoice_number = self.sales_repo.create_sale(sale.to_dict())
        if self.audit_service:
            try:
                self.audit_service.log_sale_recorded(sale)
            except OSError:
                logger.exception("[VENTA] %s guardada sin registro de auditoría", invoice_number)
        logger.info("[VENTA] %s guardada (total %s)", invoice_number, sale.total)
        return invoice_number

    # =========================================================================
    # CONSULTA
    # =========================================================================

    def list_sales(self, status: Optional[SaleStatus] = None) -> List[FinalizedSale]:
        if status is None:
            records = self.sales_repo.load()
        else:
            records = self.sales_repo.get_sales_by_status(status.value)
        return [FinalizedSale.from_dict(r) for r in records]

    def get_sale(self, invoice_number: str) -> Optional[FinalizedSale]:
        data = self.sales_repo.get_by_invoice(invoice_number)
        return FinalizedSale.from_dict(data) if data else None

    # =========================================================================
    # ESTADOS
    # =========================================================================

    def update_status(self, invoice_number: str, status: Any, user: str) -> Dict[str, Any]:
        """
        Cambia el estado de una venta registrada.

        Args:
            invoice_number: Boleta
            status: COMPLETED, PENDING o REFUNDED
            user: Quién hace el cambio

        Returns:
            Dict con ok, error o sale
        """
        try:
            new_status = SaleStatus(str(status or '').strip().upper())
        except ValueError:
            return {'ok': False, 'error': f'Estado inválido: {status}'}

        sale = self.get_sale(invoice_number)
        if sale is None:
            return {'ok': False, 'error': 'Venta no encontrada', 'not_found': True}

        old_status = sale.status
        if old_status == new_status:
            return {'ok': True, 'mensaje': 'Sin cambios', 'sale': sale}

        self.sales_repo.update_sale(invoice_number, {'status': new_status.value})
        if self.audit_service:
            self.audit_service.log_sale_status_change(
                user, invoice_number, old_status.value, new_status.value
            )
        logger.info("[VENTA] %s: %s -> %s", invoice_number, old_status.value, new_status.value)
        return {
            'ok': True,
            'mensaje': f'Venta {invoice_number} ahora {new_status.value}',
            'sale': sale.with_status(new_status),
        }
