# ==============================================================================
# SERVICIO DE CATÁLOGO
# ==============================================================================
# Productos para la caja: búsqueda por código de barras, id o texto, alta y
# edición, y ajustes manuales de stock. El stock se informa pero no se valida
# al vender.
# ==============================================================================

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from pos_ledger.models import Product, to_money, to_whole_number
from pos_ledger.repositories.interfaces import ICatalogRepository
from pos_ledger.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Servicio de catálogo.

    Responsabilidades:
    - Resolver un código escaneado (barcode primero, luego id)
    - Búsqueda por nombre o código
    - Alta y edición de productos (id y código de barras únicos)
    - Ajustes de stock auditados
    - Cargar el catálogo demo en una instalación nueva
    """

    def __init__(
        self,
        catalog_repo: ICatalogRepository,
        audit_service: AuditService = None
    ):
        self.catalog_repo = catalog_repo
        self.audit_service = audit_service

    def list_products(self) -> List[Product]:
        return [Product.from_dict(p) for p in self.catalog_repo.load().values()]

    def get_product(self, product_id: str) -> Optional[Product]:
        data = self.catalog_repo.get_product(str(product_id))
        return Product.from_dict(data) if data else None

    def lookup(self, code: str) -> Optional[Product]:
        """
        Resuelve lo que llega del lector o del click en el catálogo.

        Args:
            code: Código de barras o id de producto

        Returns:
            Producto, o None si no existe
        """
        code = str(code or '').strip()
        if not code:
            return None
        data = self.catalog_repo.find_by_barcode(code) or self.catalog_repo.get_product(code)
        if data is None:
            logger.debug("[CATALOGO] Código sin producto: %s", code)
            return None
        return Product.from_dict(data)

    def search(self, query: str) -> List[Product]:
        """Nombre (sin distinguir mayúsculas) o parte del código de barras."""
        products = self.list_products()
        query = (query or '').strip()
        if not query:
            return products
        needle = query.lower()
        return [
            p for p in products
            if needle in p.name.lower() or query in p.barcode
        ]

    def seed_defaults(self, products: List[Dict[str, Any]]) -> int:
        """
        Carga productos iniciales si el catálogo está vacío.

        Returns:
            Cantidad de productos cargados (0 si ya había catálogo)
        """
        if self.catalog_repo.load():
            return 0
        for data in products:
            self.catalog_repo.save_product(Product.from_dict(data).to_dict())
        logger.info("[CATALOGO] Catálogo demo cargado (%d productos)", len(products))
        return len(products)

    # =========================================================================
    # ALTA Y EDICIÓN
    # =========================================================================

    def create_product(self, data: Dict[str, Any], user: str = '') -> Dict[str, Any]:
        """
        Da de alta un producto.

        Args:
            data: name y price obligatorios; id, barcode, stock y category opcionales
                  (sin id se usa el siguiente numérico)
            user: Usuario que crea (para auditoría)

        Returns:
            Dict con ok/error y el producto creado
        """
        name = str(data.get('name') or '').strip()
        if not name:
            return {'ok': False, 'error': 'El nombre es obligatorio'}

        try:
            price = to_money(data.get('price'))
        except ValueError:
            return {'ok': False, 'error': f"Precio inválido: {data.get('price')!r}"}
        if price < 0:
            return {'ok': False, 'error': 'El precio no puede ser negativo'}

        stock = to_whole_number(data.get('stock', 0))
        if stock is None or stock < 0:
            return {'ok': False, 'error': f"Stock inválido: {data.get('stock')!r}"}

        barcode = str(data.get('barcode') or '').strip()
        if barcode and self.catalog_repo.find_by_barcode(barcode):
            return {'ok': False, 'error': f'Código de barras ya registrado: {barcode}'}

        product_id = str(data.get('id') or '').strip() or self.catalog_repo.next_id()
        if self.catalog_repo.get_product(product_id):
            return {'ok': False, 'error': f'Ya existe un producto con id {product_id}'}

        product = Product(
            id=product_id,
            name=name,
            price=price,
            barcode=barcode,
            stock=stock,
            category=str(data.get('category') or '').strip(),
        )
        self.catalog_repo.save_product(product.to_dict())

        if self.audit_service:
            self.audit_service.log_product_created(user, product)
        logger.info("[CATALOGO] Producto %s creado (%s)", product.id, product.name)
        return {'ok': True, 'mensaje': f'Producto {product.name} creado', 'product': product}

    def update_product(
        self,
        product_id: str,
        updates: Dict[str, Any],
        user: str = ''
    ) -> Dict[str, Any]:
        """
        Actualiza datos de un producto.

        El stock no se edita aquí: se mueve con adjust_stock() para que
        cada cambio quede auditado con su motivo.

        Returns:
            Dict con ok/error (not_found si no existe) y el producto
        """
        product = self.get_product(product_id)
        if product is None:
            return {'ok': False, 'error': f'Producto no encontrado: {product_id}', 'not_found': True}

        changes: Dict[str, Any] = {}
        if 'name' in updates:
            name = str(updates['name'] or '').strip()
            if not name:
                return {'ok': False, 'error': 'El nombre es obligatorio'}
            changes['name'] = name
        if 'price' in updates:
            try:
                price = to_money(updates['price'])
            except ValueError:
                return {'ok': False, 'error': f"Precio inválido: {updates['price']!r}"}
            if price < 0:
                return {'ok': False, 'error': 'El precio no puede ser negativo'}
            changes['price'] = price
        if 'barcode' in updates:
            barcode = str(updates['barcode'] or '').strip()
            owner = self.catalog_repo.find_by_barcode(barcode) if barcode else None
            if owner and str(owner.get('id')) != product.id:
                return {'ok': False, 'error': f'Código de barras ya registrado: {barcode}'}
            changes['barcode'] = barcode
        if 'category' in updates:
            changes['category'] = str(updates['category'] or '').strip()

        changes = {k: v for k, v in changes.items() if getattr(product, k) != v}
        if not changes:
            return {'ok': True, 'mensaje': 'Sin cambios', 'product': product}

        updated = replace(product, **changes)
        self.catalog_repo.save_product(updated.to_dict())

        if self.audit_service:
            stored = updated.to_dict()
            self.audit_service.log_product_updated(user, updated, {k: stored[k] for k in changes})
        logger.info("[CATALOGO] Producto %s actualizado: %s", updated.id, ", ".join(sorted(changes)))
        return {'ok': True, 'mensaje': f'Producto {updated.name} actualizado', 'product': updated}

    # =========================================================================
    # STOCK
    # =========================================================================

    def adjust_stock(
        self,
        product_id: str,
        adjustment: Any,
        reason: str = '',
        user: str = ''
    ) -> Dict[str, Any]:
        """
        Ajuste manual de stock (conteo, merma, ingreso).

        Args:
            product_id: Producto a ajustar
            adjustment: Unidades a sumar (negativo para restar), distinto de 0
            reason: Motivo (opcional)
            user: Usuario que ajusta (para auditoría)

        Returns:
            Dict con ok/error (not_found si no existe) y el producto con el stock nuevo
        """
        delta = to_whole_number(adjustment)
        if not delta:
            return {'ok': False, 'error': f'Ajuste inválido: {adjustment!r}'}

        product = self.get_product(product_id)
        if product is None:
            return {'ok': False, 'error': f'Producto no encontrado: {product_id}', 'not_found': True}

        old_stock = product.stock
        if old_stock + delta < 0:
            return {'ok': False, 'error': f'Stock insuficiente: hay {old_stock} unidades'}

        product.stock = old_stock + delta
        self.catalog_repo.save_product(product.to_dict())

        reason = str(reason or '').strip()
        if self.audit_service:
            self.audit_service.log_stock_adjusted(user, product, delta, old_stock, reason)
        logger.info(
            "[CATALOGO] Stock de %s: %d -> %d (%s)",
            product.id, old_stock, product.stock, reason or 'sin motivo'
        )
        return {
            'ok': True,
            'mensaje': f'Stock ajustado. Nuevo stock: {product.stock}',
            'product': product,
        }
