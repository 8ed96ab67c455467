# ==============================================================================
# LIBRO DEL CARRITO (CART LEDGER)
# ==============================================================================
# Carrito en memoria de UNA caja: líneas, descuento, impuesto, método de pago
# y cliente. Calcula totales en cada lectura y, al cobrar, congela el estado
# en una FinalizedSale que entrega a los handlers de cierre (persistencia,
# auditoría).
#
# Cada caja tiene su propia instancia (ver TerminalService); no hay carrito
# global.
# ==============================================================================

import logging
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from pos_ledger.config import DEFAULT_STAFF
from pos_ledger.models import (
    ZERO,
    CartLine,
    Customer,
    FinalizedSale,
    PaymentMethod,
    SaleLine,
    SaleStatus,
    StaffIdentity,
    money_to_json,
    to_money,
)
from pos_ledger.services.invoice_numbers import InvoiceNumberGenerator, default_invoice_numbers

logger = logging.getLogger(__name__)

CheckoutHandler = Callable[[FinalizedSale], Any]


class EmptyCartError(Exception):
    """Se intentó cobrar un carrito sin líneas."""
    pass


class CartLedger:
    """
    Carrito de una caja.

    Responsabilidades:
    - Agregar/quitar líneas y cambiar cantidades (líneas únicas por producto)
    - Descuento, impuesto, método de pago y datos del cliente
    - Subtotal y total calculados siempre desde las líneas actuales
    - Cobro: congelar → entregar a handlers → vaciar, en ese orden

    Las operaciones nunca fallan salvo checkout() con el carrito vacío.
    Descuento e impuesto negativos se aceptan tal cual y el total puede
    quedar negativo.
    """

    def __init__(
        self,
        terminal_id: str = '',
        handlers: List[CheckoutHandler] = None,
        invoice_numbers: InvoiceNumberGenerator = None,
        clock: Callable[[], datetime] = None
    ):
        """
        Args:
            terminal_id: Caja dueña del carrito
            handlers: Funciones que reciben cada venta cerrada
            invoice_numbers: Generador de boletas (compartido entre cajas)
            clock: Reloj UTC (inyectable en tests)
        """
        self.terminal_id = terminal_id
        self._handlers: List[CheckoutHandler] = list(handlers or [])
        self._invoice_numbers = invoice_numbers or default_invoice_numbers
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.last_handoff_failures: List[Tuple[str, Exception]] = []
        self._clear()

    def _clear(self) -> None:
        self._lines: Dict[str, CartLine] = {}
        self.discount = ZERO
        self.tax = ZERO
        self.payment_method = PaymentMethod.default()
        self.customer = Customer()

    def add_checkout_handler(self, handler: CheckoutHandler) -> None:
        self._handlers.append(handler)

    # =========================================================================
    # LECTURA
    # =========================================================================

    @property
    def lines(self) -> List[CartLine]:
        """Copias de las líneas, en orden de llegada."""
        return [replace(line) for line in self._lines.values()]

    def get_line(self, product_id: str) -> Optional[CartLine]:
        line = self._lines.get(product_id)
        return replace(line) if line else None

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        """Unidades totales en el carrito."""
        return sum(line.quantity for line in self._lines.values())

    def compute_subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), ZERO)

    def compute_total(self) -> Decimal:
        return self.compute_subtotal() - self.discount + self.tax

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    def add_line(
        self,
        product_id: str,
        name: str,
        unit_price: Any,
        quantity: int = 1
    ) -> Optional[CartLine]:
        """
        Agrega un producto. Si ya está en el carrito se suma la cantidad
        (se conserva el precio de la línea existente).

        Returns:
            Copia de la línea resultante, o None si no quedó línea
        """
        quantity = int(quantity)
        line = self._lines.get(product_id)
        if line is None:
            if quantity <= 0:
                return None
            line = CartLine(
                product_id=product_id,
                name=name,
                unit_price=to_money(unit_price),
                quantity=quantity,
            )
            self._lines[product_id] = line
        else:
            if line.quantity + quantity <= 0:
                self.remove_line(product_id)
                return None
            line.quantity += quantity
        return replace(line)

    def remove_line(self, product_id: str) -> bool:
        """Quita la línea; si no existe no hace nada."""
        return self._lines.pop(product_id, None) is not None

    def set_quantity(self, product_id: str, quantity: int) -> Optional[CartLine]:
        """Cantidad <= 0 equivale a quitar la línea. Producto ausente: no-op."""
        quantity = int(quantity)
        line = self._lines.get(product_id)
        if line is None:
            return None
        if quantity <= 0:
            self.remove_line(product_id)
            return None
        line.quantity = quantity
        return replace(line)

    def set_discount(self, amount: Any) -> None:
        self.discount = to_money(amount)

    def set_tax(self, amount: Any) -> None:
        self.tax = to_money(amount)

    def set_payment_method(self, method: Any) -> None:
        """
        Raises:
            InvalidPaymentMethodError: Si el método no existe
        """
        self.payment_method = PaymentMethod.parse(method)

    def set_customer(self, partial: Dict[str, Any] = None, **fields) -> Customer:
        """Merge superficial sobre el cliente actual."""
        updates = dict(partial or {})
        updates.update(fields)
        self.customer = self.customer.merged(updates)
        return self.customer

    # =========================================================================
    # CIERRE
    # =========================================================================

    def _snapshot(
        self,
        staff: Optional[StaffIdentity],
        status: SaleStatus,
        invoice_number: str
    ) -> FinalizedSale:
        subtotal = self.compute_subtotal()
        return FinalizedSale(
            id=self._invoice_numbers.new_sale_id(),
            invoice_number=invoice_number,
            timestamp=self._clock(),
            customer=self.customer,
            lines=tuple(SaleLine.from_cart_line(line) for line in self._lines.values()),
            subtotal=subtotal,
            discount=self.discount,
            tax=self.tax,
            total=subtotal - self.discount + self.tax,
            payment_method=self.payment_method,
            status=status,
            staff=staff or StaffIdentity.from_dict(DEFAULT_STAFF),
            terminal_id=self.terminal_id,
        )

    def draft_sale(self, staff: StaffIdentity = None) -> FinalizedSale:
        """
        Venta PENDING con el estado actual, para vista previa de boleta.
        No vacía el carrito, no llama a los handlers ni reserva número de boleta.

        Raises:
            EmptyCartError: Si no hay líneas
        """
        if self.is_empty:
            raise EmptyCartError("El carrito está vacío")
        return self._snapshot(
            staff, SaleStatus.PENDING, self._invoice_numbers.peek_invoice_number()
        )

    def checkout(self, staff: StaffIdentity = None) -> FinalizedSale:
        """
        Cobra el carrito.

        Orden fijo: congelar la venta, entregarla a cada handler y recién
        entonces vaciar. Un handler que falla se registra en el log y en
        last_handoff_failures; no detiene a los demás ni revierte el vaciado.

        Returns:
            La venta finalizada (COMPLETED)

        Raises:
            EmptyCartError: Si no hay líneas (el carrito queda intacto)
        """
        if self.is_empty:
            raise EmptyCartError("El carrito está vacío")

        sale = self._snapshot(
            staff, SaleStatus.COMPLETED, self._invoice_numbers.next_invoice_number()
        )
        self.last_handoff_failures = []
        for handler in self._handlers:
            try:
                handler(sale)
            except Exception as e:
                name = getattr(handler, '__qualname__', repr(handler))
                logger.exception(
                    "[CAJA %s] No se pudo entregar la venta %s a %s",
                    self.terminal_id, sale.invoice_number, name
                )
                self.last_handoff_failures.append((name, e))
        self._clear()

        logger.info(
            "[CAJA %s] Venta %s cobrada: %d ítems, total %s (%s)",
            self.terminal_id, sale.invoice_number, sale.item_count,
            sale.total, sale.payment_method.value
        )
        return sale

    def cancel(self) -> None:
        """Vacía el carrito sin generar venta."""
        self._clear()
        logger.info("[CAJA %s] Carrito cancelado", self.terminal_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'terminal_id': self.terminal_id,
            'lines': [line.to_dict() for line in self._lines.values()],
            'discount': money_to_json(self.discount),
            'tax': money_to_json(self.tax),
            'payment_method': self.payment_method.value,
            'customer': self.customer.to_dict(),
            'subtotal': money_to_json(self.compute_subtotal()),
            'total': money_to_json(self.compute_total()),
            'item_count': self.item_count,
            'items_count': len(self._lines),
        }
