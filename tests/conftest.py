import os

import pytest
from fastapi.testclient import TestClient

from catalog import Catalog
from config import BASE_DIR, Settings
from main import create_app
from repository import FileOrderStore
from schemas import Product, Vendor


@pytest.fixture
def vendor_data():
    return {
        "name": "Kiln & Co Ceramics",
        "address": "114 Harbor Rd, Portland, OR 97209",
        "phone": "(503) 555-0142",
        "email": "orders@kilnandco.example",
        "timeline": "7-10 business days",
        "rating": 4.7,
        "specializations": ["Sublimation"],
    }


@pytest.fixture
def mug(vendor_data):
    return Product(
        name="Mug",
        type="Drinkware",
        quantity=500,
        base_price=10,
        bulk_price=7,
        bulk_threshold=50,
        color=["White"],
        brand="Kiln & Co",
        material="Ceramic",
        vendor=Vendor(**vendor_data),
    )


@pytest.fixture
def catalog():
    return Catalog.from_dir(os.path.join(BASE_DIR, "data"))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        orders_file=str(tmp_path / "orders.json"),
        catalog_dir=os.path.join(BASE_DIR, "data"),
        upload_dir=str(tmp_path / "customDesigns"),
    )


@pytest.fixture
def store(settings):
    return FileOrderStore(settings.orders_file)


@pytest.fixture
def client(settings, store, catalog):
    app = create_app(settings, store=store, catalog=catalog)
    with TestClient(app) as c:
        yield c
