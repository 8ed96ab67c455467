# ==============================================================================
# REPOSITORIO BASE - Lectura/escritura de archivos JSON
# ==============================================================================

import json
import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class JsonFileRepository(ABC):
    """
    Base de todos los repositorios JSON.

    Cada repositorio es dueño de un archivo dentro de la carpeta de datos.
    Las escrituras van a un .tmp y luego se reemplaza el original, bajo un
    lock compartido por todos los repositorios del proceso.
    """

    FILE_NAME = ''

    _file_lock = threading.RLock()

    def __init__(self, base_path: str):
        """
        Args:
            base_path: Carpeta de datos (se crea si no existe)
        """
        os.makedirs(base_path, exist_ok=True)
        self.file_path = os.path.join(base_path, self.FILE_NAME)
        if not os.path.exists(self.file_path):
            self._write_raw(self._empty_data())

    @abstractmethod
    def _empty_data(self) -> Any:
        """Estructura inicial del archivo ({} o [])."""

    def _read_raw(self) -> Any:
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (json.JSONDecodeError, FileNotFoundError):
                # Archivo corrupto o borrado: se trata como vacío
                return self._empty_data()

    def _write_raw(self, data: Any) -> None:
        with self._file_lock:
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except Exception:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise


class DictRepository(JsonFileRepository):
    """
    Datos guardados como diccionario {id: registro}.

    Ejemplo: catalog.json -> {"1": {...}, "2": {...}}
    """

    def _empty_data(self) -> Dict:
        return {}

    def get_all(self) -> Dict[str, Any]:
        data = self._read_raw()
        return data if isinstance(data, dict) else {}

    def get_by_id(self, record_id: Any) -> Optional[Dict[str, Any]]:
        # Las claves JSON son siempre str
        return self.get_all().get(str(record_id))

    def save_all(self, data: Dict[str, Any]) -> None:
        self._write_raw(data)

    def update(self, record_id: Any, record_data: Dict[str, Any]) -> None:
        with self._file_lock:
            data = self.get_all()
            data[str(record_id)] = record_data
            self._write_raw(data)


class ListRepository(JsonFileRepository):
    """
    Datos guardados como lista, el más reciente primero.

    Ejemplo: sales.json -> [{venta más nueva}, ..., {venta más antigua}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        self._write_raw(data)

    def prepend(self, record: Dict[str, Any]) -> None:
        """Inserta un registro al inicio."""
        with self._file_lock:
            data = self.get_all()
            data.insert(0, record)
            self.save_all(data)

    def find_by(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        for record in self.get_all():
            if record.get(field) == value:
                return record
        return None

    def find_all_by(self, field: str, value: Any) -> List[Dict[str, Any]]:
        return [r for r in self.get_all() if r.get(field) == value]

    def update_where(self, field: str, value: Any, updates: Dict[str, Any]) -> bool:
        """
        Actualiza los registros cuyo campo coincide.

        Returns:
            True si se actualizó al menos uno
        """
        with self._file_lock:
            data = self.get_all()
            updated = False
            for record in data:
                if record.get(field) == value:
                    record.update(updates)
                    updated = True
            if updated:
                self._write_raw(data)
            return updated
