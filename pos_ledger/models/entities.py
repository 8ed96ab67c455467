# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Carrito, venta finalizada, catálogo y auditoría.
# Los montos son siempre Decimal; se serializan como números JSON.
# ==============================================================================

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pos_ledger.config import WALK_IN_CUSTOMER

ZERO = Decimal('0')


def to_money(value: Any) -> Decimal:
    """
    Convierte un monto de entrada (int, float, str, Decimal) a Decimal.

    Los float pasan por su representación str, así 29.99 * 3 == 89.97.

    Raises:
        ValueError: Si el valor no es un número finito
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, bool) or value is None:
        raise ValueError(f"Monto inválido: {value!r}")
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Monto inválido: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Monto inválido: {value!r}")
    return amount


def money_to_json(amount: Decimal) -> float:
    """Decimal → float para respuestas JSON y archivos."""
    return float(amount)


def to_whole_number(value: Any) -> Optional[int]:
    """
    Entero exacto para cantidades y ajustes de stock.

    Acepta 5, 5.0 y "5"; rechaza 2.5, "2.5", True y texto.

    Returns:
        El entero, o None si el valor no es un entero exacto
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


# ==============================================================================
# ENUMERACIONES
# ==============================================================================

class InvalidPaymentMethodError(ValueError):
    """El método de pago recibido no pertenece a PaymentMethod."""
    pass


class PaymentMethod(str, Enum):
    """Métodos de pago aceptados en caja."""
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    MOBILE_PAYMENT = "MOBILE_PAYMENT"
    BANK_TRANSFER = "BANK_TRANSFER"

    @classmethod
    def default(cls) -> 'PaymentMethod':
        return cls.CASH

    @classmethod
    def parse(cls, value: Any) -> 'PaymentMethod':
        """
        Valida un método de pago venido de la UI.

        Acepta mayúsculas/minúsculas y '-' o espacios en lugar de '_'
        ("credit card", "Mobile-Payment").

        Raises:
            InvalidPaymentMethodError: Si no es un método conocido
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidPaymentMethodError(f"Método de pago inválido: {value!r}")
        key = value.strip().upper().replace('-', '_').replace(' ', '_')
        try:
            return cls(key)
        except ValueError:
            raise InvalidPaymentMethodError(f"Método de pago inválido: {value!r}") from None


class SaleStatus(str, Enum):
    """Estados posibles de una venta."""
    COMPLETED = "COMPLETED"   # Cobrada en caja
    PENDING = "PENDING"       # Borrador (vista previa de boleta)
    REFUNDED = "REFUNDED"     # Devuelta después del cobro


class AuditType(str, Enum):
    """Tipos de eventos de auditoría."""
    SALE = "SALE"
    CART = "CART"
    PRODUCT = "PRODUCT"
    STOCK = "STOCK"
    SYSTEM = "SYSTEM"


# ==============================================================================
# ENTIDADES DE CARRITO
# ==============================================================================

@dataclass
class CartLine:
    """
    Línea del carrito en curso. Única por product_id.

    line_total no se guarda: se calcula en cada lectura.
    """
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'name': self.name,
            'unit_price': money_to_json(self.unit_price),
            'quantity': self.quantity,
            'line_total': money_to_json(self.line_total),
        }


@dataclass(frozen=True)
class Customer:
    """
    Datos opcionales del cliente.

    Attributes:
        name: Nombre (si falta, la venta es "Walk-in Customer")
        email: Correo
        phone: Teléfono
    """
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    FIELDS = ('name', 'email', 'phone')

    def merged(self, partial: Dict[str, Any]) -> 'Customer':
        """Merge superficial: las claves presentes reemplazan, las desconocidas se ignoran."""
        updates = {k: v for k, v in (partial or {}).items() if k in self.FIELDS}
        return replace(self, **updates)

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, f) for f in self.FIELDS)

    @property
    def has_contact(self) -> bool:
        """La boleta solo imprime cliente si hay nombre o correo."""
        return bool(self.name or self.email)

    def to_dict(self) -> Dict[str, Any]:
        return {f: getattr(self, f) for f in self.FIELDS if getattr(self, f) is not None}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Customer':
        return cls().merged(data or {})


@dataclass(frozen=True)
class StaffIdentity:
    """Cajero que cierra la venta."""
    name: str
    email: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'email': self.email}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StaffIdentity':
        return cls(name=data.get('name', ''), email=data.get('email', '') or '')


# ==============================================================================
# ENTIDADES DE VENTA
# ==============================================================================

@dataclass(frozen=True)
class SaleLine:
    """Copia inmutable de una CartLine al momento del cierre."""
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal

    @classmethod
    def from_cart_line(cls, line: CartLine) -> 'SaleLine':
        return cls(
            product_id=line.product_id,
            name=line.name,
            unit_price=line.unit_price,
            quantity=line.quantity,
            line_total=line.line_total,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'name': self.name,
            'unit_price': money_to_json(self.unit_price),
            'quantity': self.quantity,
            'line_total': money_to_json(self.line_total),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SaleLine':
        unit_price = to_money(data.get('unit_price', 0))
        quantity = int(data.get('quantity', 0))
        line_total = data.get('line_total')
        return cls(
            product_id=str(data.get('product_id', '')),
            name=data.get('name', ''),
            unit_price=unit_price,
            quantity=quantity,
            line_total=to_money(line_total) if line_total is not None else unit_price * quantity,
        )


@dataclass(frozen=True)
class FinalizedSale:
    """
    Registro inmutable de una venta cerrada en caja.

    Una vez emitido pertenece al repositorio de ventas; el carrito
    no guarda ninguna referencia.

    Attributes:
        id: Identificador interno (uuid hex)
        invoice_number: Número de boleta (INV-<ms>)
        timestamp: Momento del cierre (UTC)
        customer: Datos del cliente (puede estar vacío)
        lines: Líneas copiadas del carrito
        subtotal / discount / tax / total: Montos al momento del cierre
        payment_method: Método de pago elegido
        status: COMPLETED al cobrar, PENDING en vista previa
        staff: Cajero
        terminal_id: Caja donde se cobró
    """
    id: str
    invoice_number: str
    timestamp: datetime
    customer: Customer
    lines: Tuple[SaleLine, ...]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    payment_method: PaymentMethod
    status: SaleStatus
    staff: StaffIdentity
    terminal_id: str = ''

    @property
    def customer_label(self) -> str:
        return self.customer.name or WALK_IN_CUSTOMER

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def with_status(self, status: SaleStatus) -> 'FinalizedSale':
        return replace(self, status=status)

    def to_dict(self) -> Dict[str, Any]:
        """Formato de persistencia (sales.json) y de respuesta JSON."""
        return {
            'id': self.id,
            'invoice_number': self.invoice_number,
            'timestamp': self.timestamp.isoformat(),
            'customer': self.customer_label,
            'customer_info': self.customer.to_dict(),
            'lines': [line.to_dict() for line in self.lines],
            'subtotal': money_to_json(self.subtotal),
            'discount': money_to_json(self.discount),
            'tax': money_to_json(self.tax),
            'total': money_to_json(self.total),
            'payment_method': self.payment_method.value,
            'status': self.status.value,
            'staff': self.staff.to_dict(),
            'terminal_id': self.terminal_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FinalizedSale':
        return cls(
            id=data.get('id', ''),
            invoice_number=data.get('invoice_number', ''),
            timestamp=datetime.fromisoformat(data['timestamp']),
            customer=Customer.from_dict(data.get('customer_info')),
            lines=tuple(SaleLine.from_dict(line) for line in data.get('lines', [])),
            subtotal=to_money(data.get('subtotal', 0)),
            discount=to_money(data.get('discount', 0)),
            tax=to_money(data.get('tax', 0)),
            total=to_money(data.get('total', 0)),
            payment_method=PaymentMethod.parse(data.get('payment_method', 'CASH')),
            status=SaleStatus(data.get('status', SaleStatus.COMPLETED.value)),
            staff=StaffIdentity.from_dict(data.get('staff') or {}),
            terminal_id=data.get('terminal_id', ''),
        )


# ==============================================================================
# ENTIDADES DE CATÁLOGO
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo.

    El stock es informativo: la caja no lo valida al agregar.
    """
    id: str
    name: str
    price: Decimal
    barcode: str = ''
    stock: int = 0
    category: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': money_to_json(self.price),
            'barcode': self.barcode,
            'stock': self.stock,
            'category': self.category,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            price=to_money(data.get('price', 0)),
            barcode=str(data.get('barcode', '') or ''),
            stock=int(data.get('stock', 0)),
            category=data.get('category', ''),
        )


# ==============================================================================
# ENTIDADES DE AUDITORÍA
# ==============================================================================

@dataclass
class AuditLog:
    """
    Registro de auditoría.

    Attributes:
        type: Tipo de evento (SALE, CART, PRODUCT, STOCK, SYSTEM)
        user: Usuario que realizó la acción
        message: Mensaje legible
        timestamp: Fecha y hora del evento
        related_id: Boleta o terminal relacionada
        details: Detalles adicionales
    """
    type: str
    user: str
    message: str
    timestamp: str = ''
    related_id: str = ''
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'user': self.user,
            'message': self.message,
            'timestamp': self.timestamp,
            'related_id': self.related_id,
            'details': self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditLog':
        return cls(
            type=data.get('type', ''),
            user=data.get('user', ''),
            message=data.get('message', ''),
            timestamp=data.get('timestamp', ''),
            related_id=data.get('related_id', ''),
            details=data.get('details', {}),
        )
