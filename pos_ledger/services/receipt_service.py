# ==============================================================================
# SERVICIO DE BOLETAS
# ==============================================================================
# Arma el contenido de la boleta desde una venta (cobrada o borrador) y la
# imprime como texto plano de ancho fijo, lista para descargar o enviar a
# la impresora térmica.
# ==============================================================================

from typing import Any, Dict, List

from pos_ledger.models import FinalizedSale, money_to_json
from pos_ledger.repositories.interfaces import ISettingsRepository

RECEIPT_WIDTH = 40


def _money(value: float) -> str:
    sign = '-' if value < 0 else ''
    return f"{sign}${abs(value):,.2f}"


def _payment_label(method: str) -> str:
    # CREDIT_CARD -> Credit Card
    return method.replace('_', ' ').title()


class ReceiptService:
    """
    Servicio de boletas.

    build_receipt() produce un dict con la identidad de la tienda, datos de
    la boleta, cliente (solo si hay nombre o correo), ítems y totales.
    render_text() lo convierte en el documento descargable.
    """

    def __init__(self, settings_repo: ISettingsRepository):
        self.settings_repo = settings_repo

    def build_receipt(self, sale: FinalizedSale) -> Dict[str, Any]:
        customer_info = sale.customer.to_dict() if sale.customer.has_contact else None
        return {
            'store_info': self.settings_repo.get_store_info(),
            'receipt_info': {
                'invoice_no': sale.invoice_number,
                'date': sale.timestamp.isoformat(),
                'cashier': sale.staff.name,
                'payment_method': sale.payment_method.value,
                'status': sale.status.value,
            },
            'customer_info': customer_info,
            'items': [
                {
                    'name': line.name,
                    'quantity': line.quantity,
                    'unit_price': money_to_json(line.unit_price),
                    'total_price': money_to_json(line.line_total),
                }
                for line in sale.lines
            ],
            'subtotal': money_to_json(sale.subtotal),
            'discount': money_to_json(sale.discount),
            'tax': money_to_json(sale.tax),
            'total': money_to_json(sale.total),
        }

    def render_text(self, receipt: Dict[str, Any]) -> str:
        store = receipt['store_info']
        info = receipt['receipt_info']
        rule = '-' * RECEIPT_WIDTH
        out: List[str] = []

        for key in ('name', 'address', 'phone', 'email'):
            if store.get(key):
                out.append(str(store[key]).center(RECEIPT_WIDTH).rstrip())
        out.append(rule)

        if info.get('status') == 'PENDING':
            out.append('*** PREVIEW - NOT PAID ***'.center(RECEIPT_WIDTH).rstrip())
        out.append(f"Invoice: {info['invoice_no']}")
        out.append(f"Date:    {info['date']}")
        out.append(f"Cashier: {info['cashier']}")
        out.append(f"Payment: {_payment_label(info['payment_method'])}")

        customer = receipt.get('customer_info')
        if customer:
            out.append(rule)
            for key, label in (('name', 'Customer'), ('email', 'Email'), ('phone', 'Phone')):
                if customer.get(key):
                    out.append(f"{label}: {customer[key]}")

        out.append(rule)
        for item in receipt['items']:
            out.append(item['name'][:RECEIPT_WIDTH])
            detail = f"  {item['quantity']} x {_money(item['unit_price'])}"
            out.append(self._columns(detail, _money(item['total_price'])))

        out.append(rule)
        out.append(self._columns('Subtotal', _money(receipt['subtotal'])))
        out.append(self._columns('Discount', _money(-receipt['discount'])))
        out.append(self._columns('Tax', _money(receipt['tax'])))
        out.append(self._columns('TOTAL', _money(receipt['total'])))
        out.append(rule)
        out.append('Thank you for your purchase!'.center(RECEIPT_WIDTH).rstrip())
        return '\n'.join(out) + '\n'

    def render_sale(self, sale: FinalizedSale) -> str:
        return self.render_text(self.build_receipt(sale))

    @staticmethod
    def filename(receipt: Dict[str, Any]) -> str:
        return f"receipt-{receipt['receipt_info']['invoice_no']}.txt"

    @staticmethod
    def _columns(left: str, right: str) -> str:
        gap = max(1, RECEIPT_WIDTH - len(left) - len(right))
        return f"{left}{' ' * gap}{right}"
