# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades independientes del mecanismo de persistencia.
# ==============================================================================

from .entities import (
    # Montos
    ZERO,
    to_money,
    to_whole_number,
    money_to_json,

    # Carrito
    CartLine,
    Customer,
    StaffIdentity,
    PaymentMethod,
    InvalidPaymentMethodError,

    # Ventas
    FinalizedSale,
    SaleLine,
    SaleStatus,

    # Catálogo
    Product,

    # Auditoría
    AuditLog,
    AuditType,
)

__all__ = [
    'ZERO',
    'to_money',
    'money_to_json',
    'to_whole_number',

    'CartLine',
    'Customer',
    'StaffIdentity',
    'PaymentMethod',
    'InvalidPaymentMethodError',

    'FinalizedSale',
    'SaleLine',
    'SaleStatus',

    'Product',

    'AuditLog',
    'AuditType',
]
