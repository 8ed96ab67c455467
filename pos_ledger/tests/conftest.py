from datetime import datetime, timezone

import pytest

from pos_ledger.app_container import AppContainer
from pos_ledger.main import create_app
from pos_ledger.services import InvoiceNumberGenerator

FIXED_TS = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / 'data')


@pytest.fixture
def invoice_numbers():
    # Reloj congelado: los números salen 1000, 1001, 1002...
    return InvoiceNumberGenerator(clock_ms=lambda: 1000)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TS


@pytest.fixture
def container(data_dir):
    c = AppContainer(data_dir)
    c.seed_catalog()
    return c


@pytest.fixture
def app(data_dir):
    return create_app({
        'DATA_DIR': data_dir,
        'SEED_CATALOG': True,
        'LOG_LEVEL': 'WARNING',
        'TESTING': True,
    })


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
