import logging
from decimal import Decimal

import pytest

from pos_ledger.models import Customer, PaymentMethod, SaleStatus, StaffIdentity
from pos_ledger.services import CartLedger, EmptyCartError

STAFF = StaffIdentity(name='Marta', email='marta@example.com')


@pytest.fixture
def received():
    return []


@pytest.fixture
def ledger(invoice_numbers, fixed_clock, received):
    return CartLedger(
        terminal_id='caja-1',
        handlers=[received.append],
        invoice_numbers=invoice_numbers,
        clock=fixed_clock,
    )


def _fill(ledger):
    ledger.add_line("1", "Wireless Mouse", "29.99", 2)
    ledger.add_line("2", "USB Cable", "12.99", 1)
    ledger.set_discount(5)
    ledger.set_tax('2.50')
    ledger.set_payment_method(PaymentMethod.MOBILE_PAYMENT)
    ledger.set_customer({'name': 'Ana', 'email': 'ana@example.com'})


def test_checkout_freezes_the_cart_as_it_was(ledger, fixed_clock):
    _fill(ledger)
    expected_lines = [
        (line.product_id, line.name, line.unit_price, line.quantity, line.line_total)
        for line in ledger.lines
    ]

    sale = ledger.checkout(STAFF)

    assert [
        (line.product_id, line.name, line.unit_price, line.quantity, line.line_total)
        for line in sale.lines
    ] == expected_lines
    assert sale.subtotal == Decimal('72.97')
    assert sale.discount == Decimal('5')
    assert sale.tax == Decimal('2.50')
    assert sale.total == Decimal('70.47')
    assert sale.payment_method is PaymentMethod.MOBILE_PAYMENT
    assert sale.customer == Customer(name='Ana', email='ana@example.com')
    assert sale.status is SaleStatus.COMPLETED
    assert sale.staff == STAFF
    assert sale.terminal_id == 'caja-1'
    assert sale.timestamp == fixed_clock()
    assert sale.invoice_number == 'INV-1000'


def test_checkout_resets_the_cart(ledger):
    _fill(ledger)
    ledger.checkout(STAFF)

    assert ledger.is_empty
    assert ledger.discount == Decimal('0')
    assert ledger.tax == Decimal('0')
    assert ledger.payment_method is PaymentMethod.CASH
    assert ledger.customer == Customer()
    assert ledger.compute_total() == Decimal('0')


def test_empty_checkout_raises_and_calls_no_handler(ledger, received):
    ledger.set_discount(3)

    with pytest.raises(EmptyCartError):
        ledger.checkout(STAFF)

    assert received == []
    assert ledger.is_empty
    # El carrito queda tal cual: el descuento no se pierde
    assert ledger.discount == Decimal('3')


def test_handler_receives_sale_before_cart_is_cleared(invoice_numbers, fixed_clock):
    seen = []
    ledger = CartLedger('caja-1', invoice_numbers=invoice_numbers, clock=fixed_clock)
    ledger.add_checkout_handler(lambda sale: seen.append((sale, ledger.is_empty)))
    ledger.add_line("1", "Wireless Mouse", "29.99", 1)

    sale = ledger.checkout(STAFF)

    assert seen == [(sale, False)]
    assert ledger.is_empty


def test_failing_handler_is_logged_and_cart_still_clears(invoice_numbers, fixed_clock, caplog):
    after = []

    def broken(sale):
        raise OSError('disco lleno')

    ledger = CartLedger(
        'caja-1',
        handlers=[broken, after.append],
        invoice_numbers=invoice_numbers,
        clock=fixed_clock,
    )
    ledger.add_line("1", "Wireless Mouse", "29.99", 1)

    with caplog.at_level(logging.ERROR):
        sale = ledger.checkout(STAFF)

    assert sale.total == Decimal('29.99')
    assert ledger.is_empty
    assert after == [sale]
    assert len(ledger.last_handoff_failures) == 1
    name, error = ledger.last_handoff_failures[0]
    assert 'broken' in name
    assert isinstance(error, OSError)
    assert any(sale.invoice_number in r.getMessage() for r in caplog.records)


def test_failures_reset_on_next_checkout(invoice_numbers, fixed_clock):
    calls = []

    def flaky(sale):
        calls.append(sale)
        if len(calls) == 1:
            raise OSError('timeout')

    ledger = CartLedger('caja-1', handlers=[flaky], invoice_numbers=invoice_numbers, clock=fixed_clock)
    ledger.add_line("1", "Mouse", 10, 1)
    ledger.checkout(STAFF)
    assert len(ledger.last_handoff_failures) == 1

    ledger.add_line("1", "Mouse", 10, 1)
    ledger.checkout(STAFF)
    assert ledger.last_handoff_failures == []


def test_consecutive_checkouts_get_distinct_invoices(ledger, received):
    for _ in range(3):
        ledger.add_line("1", "Mouse", 10, 1)
        ledger.checkout(STAFF)

    invoices = [sale.invoice_number for sale in received]
    assert invoices == ['INV-1000', 'INV-1001', 'INV-1002']
    assert len({sale.id for sale in received}) == 3


def test_checkout_without_staff_uses_default_cashier(ledger):
    ledger.add_line("1", "Mouse", 10, 1)
    sale = ledger.checkout()

    assert sale.staff.name == 'Current User'


def test_walk_in_label_when_no_customer_name(ledger):
    ledger.add_line("1", "Mouse", 10, 1)
    sale = ledger.checkout(STAFF)

    assert sale.customer_label == 'Walk-in Customer'
    assert sale.to_dict()['customer'] == 'Walk-in Customer'
    assert sale.to_dict()['customer_info'] == {}


def test_draft_sale_leaves_cart_untouched(ledger, received):
    _fill(ledger)
    before = ledger.to_dict()

    draft = ledger.draft_sale(STAFF)

    assert draft.status is SaleStatus.PENDING
    assert draft.total == Decimal('70.47')
    assert received == []
    assert ledger.to_dict() == before


def test_cancel_clears_without_sale(ledger, received):
    _fill(ledger)
    ledger.cancel()

    assert ledger.is_empty
    assert ledger.payment_method is PaymentMethod.CASH
    assert received == []


def test_draft_sale_on_empty_cart_raises(ledger):
    with pytest.raises(EmptyCartError):
        ledger.draft_sale(STAFF)


def test_draft_sale_does_not_use_an_invoice_number(ledger):
    _fill(ledger)

    draft = ledger.draft_sale(STAFF)
    sale = ledger.checkout(STAFF)

    assert draft.invoice_number == 'INV-1000'
    assert sale.invoice_number == 'INV-1000'
