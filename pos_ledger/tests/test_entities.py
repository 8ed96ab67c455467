from decimal import Decimal

import pytest

from pos_ledger import config
from pos_ledger.models import (
    Customer,
    FinalizedSale,
    InvalidPaymentMethodError,
    PaymentMethod,
    SaleStatus,
    to_money,
    to_whole_number,
)


@pytest.mark.parametrize('value, expected', [
    (29.99, Decimal('29.99')),
    ('12.50', Decimal('12.50')),
    (' 3 ', Decimal('3')),
    (7, Decimal('7')),
    (Decimal('-1.5'), Decimal('-1.5')),
])
def test_to_money(value, expected):
    assert to_money(value) == expected


@pytest.mark.parametrize('value', [None, True, 'abc', 'NaN', float('inf'), ''])
def test_to_money_rejects_non_numbers(value):
    with pytest.raises(ValueError):
        to_money(value)


@pytest.mark.parametrize('raw, expected', [
    ('CASH', PaymentMethod.CASH),
    ('debit_card', PaymentMethod.DEBIT_CARD),
    ('Mobile-Payment', PaymentMethod.MOBILE_PAYMENT),
    ('bank transfer', PaymentMethod.BANK_TRANSFER),
    (PaymentMethod.CREDIT_CARD, PaymentMethod.CREDIT_CARD),
])
def test_payment_method_parse(raw, expected):
    assert PaymentMethod.parse(raw) is expected


@pytest.mark.parametrize('raw', ['CHEQUE', '', None, 3])
def test_payment_method_parse_rejects_unknown(raw):
    with pytest.raises(InvalidPaymentMethodError):
        PaymentMethod.parse(raw)


def test_customer_contact_rules():
    assert Customer().is_empty
    assert not Customer(phone='555').has_contact
    assert Customer(email='a@b.c').has_contact
    assert Customer(name='Ana').to_dict() == {'name': 'Ana'}


def test_sale_loaded_from_stored_record():
    record = {
        'id': 'abc',
        'invoice_number': 'INV-1735725600000',
        'timestamp': '2025-01-01T10:00:00+00:00',
        'customer': 'Ana',
        'customer_info': {'name': 'Ana'},
        'lines': [
            {'product_id': '1', 'name': 'Wireless Mouse', 'unit_price': 29.99, 'quantity': 3},
        ],
        'subtotal': 89.97,
        'discount': 0,
        'tax': 0,
        'total': 89.97,
        'payment_method': 'DEBIT_CARD',
        'status': 'REFUNDED',
        'staff': {'name': 'Marta'},
    }

    sale = FinalizedSale.from_dict(record)

    assert sale.lines[0].line_total == Decimal('89.97')
    assert sale.total == Decimal('89.97')
    assert sale.payment_method is PaymentMethod.DEBIT_CARD
    assert sale.status is SaleStatus.REFUNDED
    assert sale.customer_label == 'Ana'
    assert sale.item_count == 3
    assert sale.terminal_id == ''


def test_settings_overrides_win():
    settings = config.load_settings({'DATA_DIR': '/tmp/pos', 'SEED_CATALOG': False})

    assert settings['DATA_DIR'] == '/tmp/pos'
    assert settings['SEED_CATALOG'] is False
    assert settings['SECRET_KEY']
    assert settings['STORE_INFO']['name'] == 'Inventory Pro Store'


def test_settings_from_environment(monkeypatch):
    monkeypatch.setattr(config, 'SECRET_KEY', 'from-env')

    assert config.load_settings()['SECRET_KEY'] == 'from-env'


@pytest.mark.parametrize('value, expected', [
    (5, 5),
    (5.0, 5),
    ('5', 5),
    (' -3 ', -3),
    (2.5, None),
    ('2.5', None),
    (True, None),
    (None, None),
    ('muchos', None),
])
def test_to_whole_number(value, expected):
    assert to_whole_number(value) == expected
