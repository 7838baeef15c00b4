import os
from dataclasses import dataclass

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    orders_file: str = os.path.join(BASE_DIR, "data", "orders.json")
    catalog_dir: str = os.path.join(BASE_DIR, "data")
    upload_dir: str = os.path.join(BASE_DIR, "public", "customDesigns")
    order_store: str = "file"  # file | mongo | memory
    database_url: str | None = None
    database_name: str | None = None
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    port: int = 8000


def load_settings() -> Settings:
    """Build settings from environment variables."""
    return Settings(
        orders_file=os.getenv("ORDERS_FILE", Settings.orders_file),
        catalog_dir=os.getenv("CATALOG_DIR", Settings.catalog_dir),
        upload_dir=os.getenv("UPLOAD_DIR", Settings.upload_dir),
        order_store=os.getenv("ORDER_STORE", Settings.order_store).lower(),
        database_url=os.getenv("DATABASE_URL"),
        database_name=os.getenv("DATABASE_NAME"),
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES)),
        port=int(os.getenv("PORT", 8000)),
    )
