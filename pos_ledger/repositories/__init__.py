# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Todo el acceso a los archivos JSON pasa por aquí.
#
# ESTRUCTURA:
# ├── interfaces.py           → Protocolos que usan los servicios
# ├── base.py                 → DictRepository / ListRepository sobre JSON
# ├── catalog_repository.py   → catalog.json
# ├── sales_repository.py     → sales.json
# ├── audit_repository.py     → audit.json
# └── settings_repository.py  → store_settings.json
# ==============================================================================

from .interfaces import (
    ICatalogRepository,
    ISalesRepository,
    IAuditRepository,
    ISettingsRepository,
)

from .base import JsonFileRepository, DictRepository, ListRepository
from .catalog_repository import CatalogRepository
from .sales_repository import SalesRepository
from .audit_repository import AuditRepository
from .settings_repository import SettingsRepository

__all__ = [
    'ICatalogRepository',
    'ISalesRepository',
    'IAuditRepository',
    'ISettingsRepository',

    'JsonFileRepository',
    'DictRepository',
    'ListRepository',

    'CatalogRepository',
    'SalesRepository',
    'AuditRepository',
    'SettingsRepository',
]
