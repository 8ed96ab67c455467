CART = '/api/terminals/caja-1/cart'
MOUSE = '1234567890123'


def _scan(client, code=MOUSE, quantity=1, terminal='caja-1'):
    return client.post(f'/api/terminals/{terminal}/cart/scan', json={'code': code, 'quantity': quantity})


def test_empty_cart(client):
    res = client.get(CART)

    assert res.status_code == 200
    cart = res.get_json()['carrito']
    assert cart['lines'] == []
    assert cart['total'] == 0
    assert cart['payment_method'] == 'CASH'


def test_scan_adds_and_merges(client):
    _scan(client)
    res = _scan(client, quantity=2)

    assert res.status_code == 200
    body = res.get_json()
    assert body['ok']
    assert body['linea']['quantity'] == 3
    assert body['carrito']['subtotal'] == 89.97


def test_scan_unknown_code(client):
    res = _scan(client, code='0000')

    assert res.status_code == 404
    assert res.get_json()['not_found']


def test_scan_rejects_bad_input(client):
    assert client.post(f'{CART}/scan', json={}).status_code == 400
    assert _scan(client, quantity='lots').status_code == 400
    assert client.post(f'{CART}/scan', json=['x']).status_code == 400


def test_items_quantity_and_removal(client):
    client.post(f'{CART}/items', json={'product_id': '2', 'quantity': 2})
    client.post(f'{CART}/items', json={'product_id': '3'})

    res = client.post(f'{CART}/items/2/quantity', json={'quantity': 5})
    cart = res.get_json()['carrito']
    assert [line['product_id'] for line in cart['lines']] == ['2', '3']
    assert cart['lines'][0]['quantity'] == 5

    res = client.delete(f'{CART}/items/3')
    assert [line['product_id'] for line in res.get_json()['carrito']['lines']] == ['2']

    res = client.post(f'{CART}/items/2/quantity', json={'quantity': 0})
    assert res.get_json()['carrito']['lines'] == []


def test_adjustments_allow_negative_total(client):
    client.post(f'{CART}/items', json={'product_id': '2'})

    res = client.post(f'{CART}/adjustments', json={'discount': 20, 'tax': '1.01'})

    cart = res.get_json()['carrito']
    assert cart['discount'] == 20
    assert cart['tax'] == 1.01
    assert cart['total'] == -6.0


def test_adjustments_reject_non_numbers(client):
    res = client.post(f'{CART}/adjustments', json={'discount': 'free'})
    assert res.status_code == 400
    assert not res.get_json()['ok']


def test_payment_method(client):
    res = client.post(f'{CART}/payment', json={'method': 'debit card'})
    assert res.get_json()['carrito']['payment_method'] == 'DEBIT_CARD'

    res = client.post(f'{CART}/payment', json={'method': 'BARTER'})
    assert res.status_code == 400
    assert client.get(CART).get_json()['carrito']['payment_method'] == 'DEBIT_CARD'


def test_customer_merge(client):
    client.post(f'{CART}/customer', json={'name': 'Ana'})
    res = client.post(f'{CART}/customer', json={'email': 'ana@example.com'})

    assert res.get_json()['carrito']['customer'] == {'name': 'Ana', 'email': 'ana@example.com'}


def test_checkout_empty_cart(client):
    res = client.post(f'{CART}/checkout')

    assert res.status_code == 400
    body = res.get_json()
    assert body['empty_cart']
    assert not body['ok']


def test_checkout_flow(client):
    _scan(client, quantity=2)
    client.post(f'{CART}/payment', json={'method': 'CREDIT_CARD'})
    client.post(f'{CART}/customer', json={'name': 'Ana'})

    res = client.post(f'{CART}/checkout', json={'staff': {'name': 'Marta', 'email': 'm@x.com'}})

    assert res.status_code == 200
    body = res.get_json()
    sale = body['sale']
    assert body['warnings'] == []
    assert sale['total'] == 59.98
    assert sale['payment_method'] == 'CREDIT_CARD'
    assert sale['customer'] == 'Ana'
    assert sale['staff']['name'] == 'Marta'
    assert sale['status'] == 'COMPLETED'
    assert sale['invoice_number'].startswith('INV-')
    assert body['receipt_url'] == f"/receipt/{sale['invoice_number']}"

    cart = client.get(CART).get_json()['carrito']
    assert cart['lines'] == []
    assert cart['payment_method'] == 'CASH'
    assert cart['customer'] == {}

    listed = client.get('/api/sales').get_json()['sales']
    assert [s['invoice_number'] for s in listed] == [sale['invoice_number']]

    receipt = client.get(body['receipt_url'])
    assert receipt.status_code == 200
    assert receipt.mimetype == 'text/plain'
    assert 'attachment' in receipt.headers['Content-Disposition']
    text = receipt.get_data(as_text=True)
    assert sale['invoice_number'] in text
    assert 'Customer: Ana' in text
    assert 'Payment: Credit Card' in text


def test_terminals_are_isolated(client):
    _scan(client, terminal='caja-2')

    assert client.get(CART).get_json()['carrito']['lines'] == []
    lines = client.get('/api/terminals/caja-2/cart').get_json()['carrito']['lines']
    assert len(lines) == 1


def test_cancel(client):
    _scan(client)
    res = client.post(f'{CART}/cancel', json={'staff': 'Marta'})

    assert res.get_json()['carrito']['lines'] == []
    logs = client.get('/api/audit?related_id=caja-1').get_json()['logs']
    assert logs[0]['type'] == 'CART'
    assert logs[0]['user'] == 'Marta'


def test_receipt_preview(client):
    _scan(client)

    res = client.get(f'{CART}/receipt')

    assert res.status_code == 200
    assert 'PREVIEW' in res.get_data(as_text=True)
    assert len(client.get(CART).get_json()['carrito']['lines']) == 1
    assert client.get('/api/sales').get_json()['sales'] == []


def test_sale_status_change(client):
    _scan(client)
    invoice = client.post(f'{CART}/checkout').get_json()['sale']['invoice_number']

    res = client.post(f'/api/sales/{invoice}/status', json={'status': 'REFUNDED'})
    assert res.status_code == 200
    assert res.get_json()['sale']['status'] == 'REFUNDED'

    refunded = client.get('/api/sales?status=refunded').get_json()['sales']
    assert [s['invoice_number'] for s in refunded] == [invoice]

    assert client.post(f'/api/sales/{invoice}/status', json={'status': 'GONE'}).status_code == 400
    assert client.post('/api/sales/INV-1/status', json={'status': 'REFUNDED'}).status_code == 404
    assert client.get('/api/sales?status=GONE').status_code == 400


def test_sale_not_found(client):
    assert client.get('/api/sales/INV-1').status_code == 404
    assert client.get('/receipt/INV-1').status_code == 404


def test_products(client):
    res = client.get('/api/products?q=mouse')
    assert [p['name'] for p in res.get_json()['products']] == ['Wireless Mouse']

    res = client.get(f'/api/products/lookup/{MOUSE}')
    assert res.get_json()['product']['price'] == 29.99

    assert client.get('/api/products/lookup/nada').status_code == 404


def test_scan_rejects_non_positive_or_fractional_quantity(client):
    _scan(client, quantity=3)

    for bad in (-3, 0, 2.5, '1.5', True):
        res = _scan(client, quantity=bad)
        assert res.status_code == 400
        assert not res.get_json()['ok']

    res = client.post(f'{CART}/items', json={'product_id': '1', 'quantity': 0})
    assert res.status_code == 400

    lines = client.get(CART).get_json()['carrito']['lines']
    assert [(line['product_id'], line['quantity']) for line in lines] == [('1', 3)]


def test_receipt_preview_of_empty_cart(client):
    res = client.get(f'{CART}/receipt')

    assert res.status_code == 400
    assert res.get_json()['empty_cart']


def test_audit_limit(client):
    _scan(client)
    client.post(f'{CART}/cancel')
    _scan(client)
    client.post(f'{CART}/cancel')

    assert len(client.get('/api/audit?limit=1').get_json()['logs']) == 1
    assert len(client.get('/api/audit').get_json()['logs']) == 2
    assert client.get('/api/audit?limit=-1').status_code == 400
    assert client.get('/api/audit?limit=many').status_code == 400


def test_create_and_update_product(client):
    res = client.post('/api/products', json={
        'name': 'Mouse Pad', 'price': 9.5, 'barcode': '777', 'stock': 4, 'staff': 'Marta',
    })
    assert res.status_code == 201
    product = res.get_json()['product']
    assert product['id'] == '7'

    assert _scan(client, code='777').status_code == 200
    assert client.post('/api/products', json={'name': 'Otro', 'price': 1, 'barcode': '777'}).status_code == 400

    res = client.post('/api/products/7', json={'price': '11.00', 'category': 'Accesorios'})
    assert res.status_code == 200
    assert res.get_json()['product']['price'] == 11.0
    assert client.post('/api/products/99', json={'name': 'X'}).status_code == 404


def test_stock_adjustment(client):
    res = client.post('/api/stock/adjustment', json={
        'productId': '2', 'adjustment': 12, 'reason': 'Recepción', 'staff': 'Marta',
    })
    assert res.status_code == 200
    body = res.get_json()
    assert body['product']['stock'] == 20
    assert 'Nuevo stock: 20' in body['mensaje']

    logs = client.get('/api/audit?related_id=2').get_json()['logs']
    assert logs[0]['type'] == 'STOCK'
    assert logs[0]['user'] == 'Marta'

    assert client.post('/api/stock/adjustment', json={'product_id': '2', 'adjustment': -21}).status_code == 400
    assert client.post('/api/stock/adjustment', json={'product_id': '99', 'adjustment': 1}).status_code == 404
    assert client.post('/api/stock/adjustment', json={'adjustment': 1}).status_code == 400
