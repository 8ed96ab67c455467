# ==============================================================================
# APLICACIÓN FLASK - API JSON de caja
# ==============================================================================
# Las rutas solo traducen request → servicio → respuesta. Toda la lógica
# vive en services/. Respuestas siempre JSON con "ok" (salvo las boletas,
# que se descargan como texto).
#
# Autenticación fuera de alcance: el cajero viaja en el body ("staff").
# ==============================================================================

import logging
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, Response, current_app, request
from werkzeug.exceptions import BadRequest, HTTPException, NotFound

from pos_ledger import config
from pos_ledger.app_container import AppContainer
from pos_ledger.models import InvalidPaymentMethodError, SaleStatus, StaffIdentity, to_whole_number
from pos_ledger.services import EmptyCartError

logger = logging.getLogger(__name__)

bp = Blueprint('pos', __name__)


def create_app(overrides: Dict[str, Any] = None) -> Flask:
    """
    Crea la aplicación.

    Args:
        overrides: Valores de configuración que ganan sobre el entorno
                   (ej: {'DATA_DIR': tmp_path, 'SEED_CATALOG': False})
    """
    settings = config.load_settings(overrides)
    config.configure_logging(settings['LOG_LEVEL'])

    app = Flask(__name__)
    app.config.update(settings)
    app.secret_key = settings['SECRET_KEY']

    container = AppContainer(
        settings['DATA_DIR'],
        store_info=settings['STORE_INFO'],
        default_staff=settings['DEFAULT_STAFF'],
    )
    if settings['SEED_CATALOG']:
        container.seed_catalog()
    app.extensions['pos_ledger'] = container

    app.register_blueprint(bp)
    logger.info("[APP] Datos en %s", settings['DATA_DIR'])
    return app


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def _container() -> AppContainer:
    return current_app.extensions['pos_ledger']


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest('Se esperaba un objeto JSON')
    return data


def _quantity_arg(
    data: Dict[str, Any],
    default: Optional[int] = None,
    minimum: Optional[int] = None
) -> int:
    """Cantidad entera exacta; con minimum, menores se rechazan."""
    raw = data.get('quantity', default)
    quantity = to_whole_number(raw)
    if quantity is None or (minimum is not None and quantity < minimum):
        raise BadRequest(f'Cantidad inválida: {raw!r}')
    return quantity


def _staff_arg(data: Dict[str, Any]) -> Optional[StaffIdentity]:
    staff = data.get('staff')
    if not staff:
        return None
    if isinstance(staff, str):
        return StaffIdentity(name=staff)
    if isinstance(staff, dict) and staff.get('name'):
        return StaffIdentity.from_dict(staff)
    raise BadRequest('Cajero inválido')


def _user_arg(data: Dict[str, Any]) -> str:
    """Nombre del cajero del body, o el cajero por defecto."""
    staff = _staff_arg(data)
    return staff.name if staff else _container().default_staff.name


def _product_response(result: Dict[str, Any]) -> Dict[str, Any]:
    response = dict(result)
    response['product'] = result['product'].to_dict()
    return response


def _status_code(result: Dict[str, Any]) -> int:
    if result['ok']:
        return 200
    return 404 if result.get('not_found') else 400


def _sale_response(result: Dict[str, Any]) -> Dict[str, Any]:
    response = dict(result)
    response['sale'] = result['sale'].to_dict()
    return response


# ═══════════════════════════════════════════════════════════════════════════
# ERRORES
# ═══════════════════════════════════════════════════════════════════════════

@bp.errorhandler(EmptyCartError)
def handle_empty_cart(e):
    return {'ok': False, 'error': str(e), 'empty_cart': True}, 400


@bp.errorhandler(InvalidPaymentMethodError)
def handle_invalid_payment(e):
    return {'ok': False, 'error': str(e)}, 400


@bp.errorhandler(HTTPException)
def handle_http_error(e):
    return {'ok': False, 'error': e.description}, e.code


# ═══════════════════════════════════════════════════════════════════════════
# CARRITO POR CAJA
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/terminals/<terminal_id>/cart', methods=['GET'])
def cart_view(terminal_id):
    return _container().terminal_service.view(terminal_id)


@bp.route('/api/terminals/<terminal_id>/cart/scan', methods=['POST'])
def cart_scan(terminal_id):
    """Body: {"code": "1234567890123", "quantity": 1}"""
    data = _json_body()
    code = str(data.get('code') or '').strip()
    if not code:
        raise BadRequest('Código vacío')
    quantity = _quantity_arg(data, 1, minimum=1)
    result = _container().terminal_service.scan(terminal_id, code, quantity)
    return result, _status_code(result)


@bp.route('/api/terminals/<terminal_id>/cart/items', methods=['POST'])
def cart_add_item(terminal_id):
    """Body: {"product_id": "1", "quantity": 1}"""
    data = _json_body()
    product_id = str(data.get('product_id') or '').strip()
    if not product_id:
        raise BadRequest('ID de producto inválido')
    result = _container().terminal_service.add_product(
        terminal_id, product_id, _quantity_arg(data, 1, minimum=1)
    )
    return result, _status_code(result)


@bp.route('/api/terminals/<terminal_id>/cart/items/<product_id>/quantity', methods=['POST'])
def cart_set_quantity(terminal_id, product_id):
    """Body: {"quantity": 3}. Cantidad <= 0 quita la línea."""
    quantity = _quantity_arg(_json_body())
    ledger = _container().terminal_service.get_ledger(terminal_id)
    ledger.set_quantity(product_id, quantity)
    return {'ok': True, 'mensaje': 'Cantidad actualizada', 'carrito': ledger.to_dict()}


@bp.route('/api/terminals/<terminal_id>/cart/items/<product_id>', methods=['DELETE'])
def cart_remove_item(terminal_id, product_id):
    ledger = _container().terminal_service.get_ledger(terminal_id)
    ledger.remove_line(product_id)
    return {'ok': True, 'mensaje': 'Producto eliminado del carrito', 'carrito': ledger.to_dict()}


@bp.route('/api/terminals/<terminal_id>/cart/adjustments', methods=['POST'])
def cart_adjustments(terminal_id):
    """Body: {"discount": 10, "tax": 5} (cualquiera de los dos)"""
    data = _json_body()
    ledger = _container().terminal_service.get_ledger(terminal_id)
    try:
        if 'discount' in data:
            ledger.set_discount(data['discount'])
        if 'tax' in data:
            ledger.set_tax(data['tax'])
    except ValueError as e:
        raise BadRequest(str(e))
    return {'ok': True, 'carrito': ledger.to_dict()}


@bp.route('/api/terminals/<terminal_id>/cart/payment', methods=['POST'])
def cart_payment(terminal_id):
    """Body: {"method": "CREDIT_CARD"}"""
    ledger = _container().terminal_service.get_ledger(terminal_id)
    ledger.set_payment_method(_json_body().get('method'))
    return {'ok': True, 'carrito': ledger.to_dict()}


@bp.route('/api/terminals/<terminal_id>/cart/customer', methods=['POST'])
def cart_customer(terminal_id):
    """Body: {"name": "...", "email": "...", "phone": "..."} (merge parcial)"""
    ledger = _container().terminal_service.get_ledger(terminal_id)
    ledger.set_customer(_json_body())
    return {'ok': True, 'carrito': ledger.to_dict()}


@bp.route('/api/terminals/<terminal_id>/cart/checkout', methods=['POST'])
def cart_checkout(terminal_id):
    """
    Cobra el carrito de la caja.

    Body opcional: {"staff": {"name": "...", "email": "..."}}

    Respuesta:
    - ok: true
    - sale: venta finalizada
    - warnings: avisos si la venta no se pudo registrar
    - receipt_url: boleta descargable
    """
    staff = _staff_arg(_json_body())
    result = _container().terminal_service.checkout(terminal_id, staff)
    response = _sale_response(result)
    response['receipt_url'] = f"/receipt/{result['sale'].invoice_number}"
    return response


@bp.route('/api/terminals/<terminal_id>/cart/cancel', methods=['POST'])
def cart_cancel(terminal_id):
    data = _json_body()
    return _container().terminal_service.cancel(terminal_id, _user_arg(data))


@bp.route('/api/terminals/<terminal_id>/cart/receipt', methods=['GET'])
def cart_receipt_preview(terminal_id):
    receipt, text = _container().terminal_service.preview_receipt(terminal_id)
    return _text_download(text, _container().receipt_service.filename(receipt))


# ═══════════════════════════════════════════════════════════════════════════
# CATÁLOGO
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/products', methods=['GET'])
def products_search():
    products = _container().catalog_service.search(request.args.get('q', ''))
    return {'ok': True, 'products': [p.to_dict() for p in products]}


@bp.route('/api/products/lookup/<code>', methods=['GET'])
def products_lookup(code):
    product = _container().catalog_service.lookup(code)
    if product is None:
        raise NotFound(f'Producto no encontrado: {code}')
    return {'ok': True, 'product': product.to_dict()}


@bp.route('/api/products', methods=['POST'])
def products_create():
    """
    Alta de producto.

    Body: {"name": "...", "price": 9.99, "barcode": "...", "stock": 10,
           "category": "...", "id": "opcional", "staff": {...}}
    """
    data = _json_body()
    result = _container().catalog_service.create_product(data, _user_arg(data))
    if not result['ok']:
        return result, _status_code(result)
    return _product_response(result), 201


@bp.route('/api/products/<product_id>', methods=['POST'])
def products_update(product_id):
    """Body: cualquiera de name, price, barcode, category (el stock va por /api/stock)"""
    data = _json_body()
    updates = {k: v for k, v in data.items() if k != 'staff'}
    result = _container().catalog_service.update_product(product_id, updates, _user_arg(data))
    if not result['ok']:
        return result, _status_code(result)
    return _product_response(result)


@bp.route('/api/stock/adjustment', methods=['POST'])
def stock_adjustment():
    """
    Ajuste manual de stock.

    Body: {"product_id": "1", "adjustment": -2, "reason": "Merma"}
    (también acepta "productId")
    """
    data = _json_body()
    product_id = str(data.get('product_id') or data.get('productId') or '').strip()
    if not product_id:
        raise BadRequest('ID de producto inválido')
    result = _container().catalog_service.adjust_stock(
        product_id, data.get('adjustment'), data.get('reason') or '', _user_arg(data)
    )
    if not result['ok']:
        return result, _status_code(result)
    return _product_response(result)


# ═══════════════════════════════════════════════════════════════════════════
# VENTAS
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/sales', methods=['GET'])
def sales_list():
    status = request.args.get('status')
    sale_status = None
    if status:
        try:
            sale_status = SaleStatus(status.upper())
        except ValueError:
            raise BadRequest(f'Estado inválido: {status}')
    sales = _container().sales_service.list_sales(sale_status)
    return {'ok': True, 'sales': [s.to_dict() for s in sales]}


@bp.route('/api/sales/<invoice_number>', methods=['GET'])
def sales_detail(invoice_number):
    sale = _container().sales_service.get_sale(invoice_number)
    if sale is None:
        raise NotFound('Venta no encontrada')
    return {'ok': True, 'sale': sale.to_dict()}


@bp.route('/api/sales/<invoice_number>/status', methods=['POST'])
def sales_status(invoice_number):
    """Body: {"status": "REFUNDED", "staff": {"name": "..."}}"""
    data = _json_body()
    result = _container().sales_service.update_status(
        invoice_number, data.get('status'), _user_arg(data)
    )
    if not result['ok']:
        return result, _status_code(result)
    return _sale_response(result)


@bp.route('/receipt/<invoice_number>', methods=['GET'])
def receipt_download(invoice_number):
    sale = _container().sales_service.get_sale(invoice_number)
    if sale is None:
        raise NotFound('Boleta no encontrada')
    receipts = _container().receipt_service
    receipt = receipts.build_receipt(sale)
    return _text_download(receipts.render_text(receipt), receipts.filename(receipt))


# ═══════════════════════════════════════════════════════════════════════════
# AUDITORÍA
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/audit', methods=['GET'])
def audit_list():
    raw_limit = request.args.get('limit', '')
    limit = None
    if raw_limit:
        limit = to_whole_number(raw_limit)
        if limit is None or limit < 0:
            raise BadRequest(f'Límite inválido: {raw_limit}')
    logs = _container().audit_service.get_logs(
        related_id=request.args.get('related_id') or None,
        limit=limit,
    )
    return {'ok': True, 'logs': logs}


def _text_download(text: str, filename: str) -> Response:
    return Response(
        text,
        mimetype='text/plain',
        headers={'Content-Disposition': f'attachment;filename={filename}'},
    )
