# ==============================================================================
# POS LEDGER - Punto de venta por terminal
# ==============================================================================
# Carrito en memoria por terminal de caja, cierre de venta con boleta y
# registro de ventas en JSON.
# ==============================================================================

__version__ = '1.0.0'
