"""
Static catalog of products and decorations.

Loaded once at startup from JSON files and treated as read-only
configuration; the app receives a Catalog instance instead of reaching for
module-level data.
"""

import json
import os
from typing import Dict, List, Optional, Tuple

from errors import NotFoundError
from schemas import Decoration, Product

PRODUCTS_FILE = "products.json"
DECORATIONS_FILE = "decorations.json"


class Catalog:
    def __init__(self, products: List[Product], decorations: List[Decoration]):
        self._products: Tuple[Product, ...] = tuple(products)
        self._decorations: Tuple[Decoration, ...] = tuple(decorations)
        self._product_map: Dict[str, Product] = {p.name.lower(): p for p in self._products}
        self._decoration_map: Dict[str, Decoration] = {d.name.lower(): d for d in self._decorations}

    @classmethod
    def from_dir(cls, catalog_dir: str) -> "Catalog":
        products = _read_items(os.path.join(catalog_dir, PRODUCTS_FILE), "products")
        decorations = _read_items(os.path.join(catalog_dir, DECORATIONS_FILE), "decorations")
        return cls(
            products=[Product(**p) for p in products],
            decorations=[Decoration(**d) for d in decorations],
        )

    def products(self, type: Optional[str] = None) -> List[Product]:
        if type:
            return [p for p in self._products if p.type.lower() == type.lower()]
        return list(self._products)

    def decorations(self) -> List[Decoration]:
        return list(self._decorations)

    def get_product(self, name: str) -> Product:
        product = self._product_map.get(name.strip().lower())
        if product is None:
            raise NotFoundError(f"Product not found: {name}")
        return product

    def get_decoration(self, name: str) -> Decoration:
        decoration = self._decoration_map.get(name.strip().lower())
        if decoration is None:
            raise NotFoundError(f"Decoration not found: {name}")
        return decoration


def _read_items(path: str, key: str) -> list:
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    # files are either {"products": [...]} or a bare list
    if isinstance(data, dict):
        data = data.get(key, [])
    return list(data)
