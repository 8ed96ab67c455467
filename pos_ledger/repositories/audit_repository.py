# ==============================================================================
# REPOSITORIO DE AUDITORÍA
# ==============================================================================
# Encapsula todo el acceso a audit.json (más reciente primero)
# ==============================================================================

from typing import Any, Dict, List

from pos_ledger.models import AuditLog
from pos_ledger.repositories.base import ListRepository


class AuditRepository(ListRepository):
    """
    Formato de audit.json:
    [
        {
            "type": "SALE",
            "user": "Current User",
            "message": "Venta INV-1735725600000 registrada ...",
            "timestamp": "2025-01-01 10:00:00",
            "related_id": "INV-1735725600000",
            "details": {...}
        }
    ]
    """

    FILE_NAME = 'audit.json'

    # Límite de registros para que el archivo no crezca sin fin
    MAX_LOGS = 10000

    def load(self) -> List[Dict[str, Any]]:
        return self.get_all()

    def save_all(self, logs: List[Dict[str, Any]]) -> None:
        super().save_all(logs[:self.MAX_LOGS])

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        entry = AuditLog(
            type=log_type,
            user=user or 'sistema',
            message=message,
            related_id=related_id,
            details=details or {},
        )
        self.prepend(entry.to_dict())
