# ==============================================================================
# REPOSITORIO DE CONFIGURACIÓN DE TIENDA
# ==============================================================================
# Encapsula el acceso a store_settings.json
# Guarda la identidad de la tienda que se imprime en las boletas.
# ==============================================================================

from typing import Any, Dict

from pos_ledger.repositories.base import DictRepository


class SettingsRepository(DictRepository):
    """
    Formato de store_settings.json:
    {
        "store": {"name": "...", "address": "...", "phone": "...", "email": "..."}
    }

    Las claves ausentes se completan con los valores por defecto
    recibidos en el constructor.
    """

    FILE_NAME = 'store_settings.json'

    STORE_KEYS = ('name', 'address', 'phone', 'email')

    def __init__(self, base_path: str, default_store_info: Dict[str, Any] = None):
        super().__init__(base_path)
        self.default_store_info = dict(default_store_info or {})

    def get_store_info(self) -> Dict[str, Any]:
        stored = self.get_by_id('store') or {}
        info = dict(self.default_store_info)
        info.update({k: v for k, v in stored.items() if k in self.STORE_KEYS and v})
        return info

    def set_store_info(self, store_info: Dict[str, Any]) -> None:
        current = self.get_by_id('store') or {}
        current.update({k: v for k, v in store_info.items() if k in self.STORE_KEYS})
        self.update('store', current)
