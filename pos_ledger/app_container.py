# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Construye (bajo demanda) los repositorios y servicios para UNA carpeta de
# datos. Cada app Flask tiene su propio contenedor en app.extensions, así
# dos apps (o dos tests) nunca comparten carritos ni archivos.
# ==============================================================================

from typing import Any, Dict, Optional

from pos_ledger import config
from pos_ledger.models import StaffIdentity
from pos_ledger.repositories import (
    AuditRepository,
    CatalogRepository,
    SalesRepository,
    SettingsRepository,
)
from pos_ledger.services import (
    AuditService,
    CatalogService,
    InvoiceNumberGenerator,
    ReceiptService,
    SalesService,
    TerminalService,
)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Uso:
        container = AppContainer(data_dir='/path/to/data')
        terminal_service = container.terminal_service
        sales_service = container.sales_service
    """

    def __init__(
        self,
        data_dir: str,
        store_info: Dict[str, Any] = None,
        default_staff: Dict[str, Any] = None
    ):
        """
        Args:
            data_dir: Carpeta donde viven los JSON
            store_info: Identidad de tienda por defecto para boletas
            default_staff: Cajero usado cuando el request no trae uno
        """
        self.data_dir = data_dir
        self.store_info = dict(store_info or config.DEFAULT_STORE_INFO)
        self.default_staff = StaffIdentity.from_dict(default_staff or config.DEFAULT_STAFF)
        self.invoice_numbers = InvoiceNumberGenerator()

        self._catalog_repo: Optional[CatalogRepository] = None
        self._sales_repo: Optional[SalesRepository] = None
        self._audit_repo: Optional[AuditRepository] = None
        self._settings_repo: Optional[SettingsRepository] = None

        self._audit_service: Optional[AuditService] = None
        self._catalog_service: Optional[CatalogService] = None
        self._sales_service: Optional[SalesService] = None
        self._receipt_service: Optional[ReceiptService] = None
        self._terminal_service: Optional[TerminalService] = None

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def catalog_repo(self) -> CatalogRepository:
        if self._catalog_repo is None:
            self._catalog_repo = CatalogRepository(self.data_dir)
        return self._catalog_repo

    @property
    def sales_repo(self) -> SalesRepository:
        if self._sales_repo is None:
            self._sales_repo = SalesRepository(self.data_dir)
        return self._sales_repo

    @property
    def audit_repo(self) -> AuditRepository:
        if self._audit_repo is None:
            self._audit_repo = AuditRepository(self.data_dir)
        return self._audit_repo

    @property
    def settings_repo(self) -> SettingsRepository:
        if self._settings_repo is None:
            self._settings_repo = SettingsRepository(self.data_dir, self.store_info)
        return self._settings_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def audit_service(self) -> AuditService:
        if self._audit_service is None:
            self._audit_service = AuditService(self.audit_repo)
        return self._audit_service

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(self.catalog_repo, self.audit_service)
        return self._catalog_service

    @property
    def sales_service(self) -> SalesService:
        if self._sales_service is None:
            self._sales_service = SalesService(self.sales_repo, self.audit_service)
        return self._sales_service

    @property
    def receipt_service(self) -> ReceiptService:
        if self._receipt_service is None:
            self._receipt_service = ReceiptService(self.settings_repo)
        return self._receipt_service

    @property
    def terminal_service(self) -> TerminalService:
        if self._terminal_service is None:
            self._terminal_service = TerminalService(
                self.catalog_service,
                self.sales_service,
                self.receipt_service,
                self.audit_service,
                self.invoice_numbers,
                self.default_staff,
            )
        return self._terminal_service

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def seed_catalog(self) -> int:
        """Carga el catálogo demo si está vacío."""
        return self.catalog_service.seed_defaults(config.DEFAULT_PRODUCTS)
