# ==============================================================================
# CONFIGURACIÓN - Valores por defecto y variables de entorno
# ==============================================================================
# Todos los valores se pueden sobrescribir por variable de entorno, y
# create_app(overrides) tiene prioridad sobre ambas (usado en tests).
#
# Variables de entorno:
#   POS_DATA_DIR         Carpeta de los JSON (catalog, sales, audit, settings)
#   POS_SECRET_KEY       Clave de Flask (OBLIGATORIA en producción)
#   POS_PRODUCTION_MODE  "1"/"true" para modo producción
#   POS_LOG_LEVEL        DEBUG, INFO, WARNING...
#   POS_SEED_CATALOG     "0"/"false" para no cargar el catálogo demo
# ==============================================================================

import logging
import os
from typing import Any, Dict

BASE = os.path.dirname(os.path.abspath(__file__))


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# ═══════════════════════════════════════════════════════════════════════════════
# ENTORNO
# ═══════════════════════════════════════════════════════════════════════════════

PRODUCTION_MODE = _env_flag('POS_PRODUCTION_MODE', False)
DATA_DIR = os.environ.get('POS_DATA_DIR', os.path.join(BASE, 'data'))
LOG_LEVEL = os.environ.get('POS_LOG_LEVEL', 'INFO')
SEED_CATALOG = _env_flag('POS_SEED_CATALOG', True)

_DEFAULT_SECRET = 'pos_ledger_dev_secret_key_change_in_production'
SECRET_KEY = os.environ.get('POS_SECRET_KEY')

# ═══════════════════════════════════════════════════════════════════════════════
# REGLAS DE VENTA
# ═══════════════════════════════════════════════════════════════════════════════

INVOICE_PREFIX = 'INV-'
WALK_IN_CUSTOMER = 'Walk-in Customer'

# Autenticación fuera de alcance: cajero usado cuando el request no trae uno
DEFAULT_STAFF = {
    'name': 'Current User',
    'email': 'user@inventorypro.com',
}

# Identidad de la tienda impresa en cada boleta.
# Se puede sobrescribir en store_settings.json (SettingsRepository).
DEFAULT_STORE_INFO = {
    'name': 'Inventory Pro Store',
    'address': '123 Main St, City, State 12345',
    'phone': '+1 (555) 123-4567',
    'email': 'store@inventorypro.com',
}

# Catálogo demo (se carga solo si catalog.json está vacío)
DEFAULT_PRODUCTS = [
    {'id': '1', 'name': 'Wireless Mouse', 'price': '29.99', 'barcode': '1234567890123', 'stock': 45},
    {'id': '2', 'name': 'USB Cable', 'price': '12.99', 'barcode': '1234567890124', 'stock': 8},
    {'id': '3', 'name': 'Keyboard', 'price': '79.99', 'barcode': '1234567890125', 'stock': 23},
    {'id': '4', 'name': 'Monitor', 'price': '299.99', 'barcode': '1234567890126', 'stock': 12},
    {'id': '5', 'name': 'Laptop Stand', 'price': '49.99', 'barcode': '1234567890127', 'stock': 15},
    {'id': '6', 'name': 'Webcam HD', 'price': '59.99', 'barcode': '1234567890128', 'stock': 8},
]


def load_settings(overrides: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Construye la configuración efectiva de la aplicación.

    Args:
        overrides: Valores que ganan sobre el entorno

    Returns:
        Diccionario con claves en mayúsculas (formato app.config de Flask)
    """
    settings = {
        'PRODUCTION_MODE': PRODUCTION_MODE,
        'DATA_DIR': DATA_DIR,
        'LOG_LEVEL': LOG_LEVEL,
        'SEED_CATALOG': SEED_CATALOG,
        'SECRET_KEY': SECRET_KEY,
        'STORE_INFO': dict(DEFAULT_STORE_INFO),
        'DEFAULT_STAFF': dict(DEFAULT_STAFF),
    }
    settings.update(overrides or {})

    if not settings['SECRET_KEY']:
        if settings['PRODUCTION_MODE']:
            logging.getLogger(__name__).warning(
                "[CONFIG] Modo producción sin POS_SECRET_KEY definida; usando clave de desarrollo"
            )
        settings['SECRET_KEY'] = _DEFAULT_SECRET
    return settings


def configure_logging(level: str = None) -> None:
    """Instala un único handler en el logger raíz (idempotente)."""
    root = logging.getLogger()
    root.setLevel((level or LOG_LEVEL).upper())
    if any(getattr(h, '_pos_ledger', False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s %(name)s: %(message)s'
    ))
    handler._pos_ledger = True
    root.addHandler(handler)
