# ==============================================================================
# NUMERACIÓN DE BOLETAS
# ==============================================================================
# Formato: INV-<milisegundos desde epoch>. Si dos cierres caen en el mismo
# milisegundo (o el reloj retrocede) se usa el último número + 1, así los
# números son únicos y crecientes dentro del proceso.
# ==============================================================================

import threading
import time
import uuid
from typing import Callable

from pos_ledger.config import INVOICE_PREFIX


class InvoiceNumberGenerator:
    """
    Generador de números de boleta compartido por todas las cajas de la app.

    Uso:
        numbers = InvoiceNumberGenerator()
        numbers.next_invoice_number()   # 'INV-1735725600000'
    """

    def __init__(
        self,
        prefix: str = INVOICE_PREFIX,
        clock_ms: Callable[[], int] = None
    ):
        """
        Args:
            prefix: Prefijo del número de boleta
            clock_ms: Reloj en milisegundos (inyectable en tests)
        """
        self.prefix = prefix
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._last = 0
        self._lock = threading.Lock()

    def next_invoice_number(self) -> str:
        with self._lock:
            stamp = max(int(self._clock_ms()), self._last + 1)
            self._last = stamp
        return f"{self.prefix}{stamp}"

    def peek_invoice_number(self) -> str:
        """Número que saldría ahora, sin reservarlo (vista previa de boleta)."""
        with self._lock:
            stamp = max(int(self._clock_ms()), self._last + 1)
        return f"{self.prefix}{stamp}"

    @staticmethod
    def new_sale_id() -> str:
        return uuid.uuid4().hex


# Generador por defecto para ledgers creados sin uno explícito
default_invoice_numbers = InvoiceNumberGenerator()
