"""
Pytest fixtures for grocer backend tests.

Every test gets its own data directory under tmp_path, so nothing touches the
real per-user data folder.
"""

from decimal import Decimal

import pytest

from grocer import create_app
from grocer.extensions import get_store
from grocer.models import Product
from grocer.services import catalog_service
from grocer.services.data_store import DataStore
from grocer.services.record_store import JsonFileRecordStore


@pytest.fixture(scope='function')
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture(scope='function')
def app(data_dir):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'GROCER_DATA_DIR': str(data_dir),
        'RECORD_STORE_BACKEND': 'json',
        'LOG_TO_FILE': False,
    })
    yield app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def app_store(app):
    """The DataStore the app's routes and commands work against."""
    with app.app_context():
        return get_store()


@pytest.fixture(scope='function')
def records(tmp_path):
    return JsonFileRecordStore(tmp_path / "records")


@pytest.fixture(scope='function')
def store(records):
    """A freshly seeded store: five default categories, no products."""
    return DataStore(records)


@pytest.fixture(scope='function')
def make_product(store):
    """Factory adding a product to `store` and returning the annotated copy."""
    def _make(name="Milk", category_id=2, price="1.00", quantity=20, **kwargs):
        product = Product(
            name=name,
            category_id=category_id,
            price=Decimal(price),
            quantity=quantity,
            **kwargs,
        )
        return catalog_service.add_product(store, product)
    return _make
