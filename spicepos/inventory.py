"""Product collection: CRUD over ``products.json`` and stock adjustments."""
import logging
from typing import List, Optional

from pydantic import ValidationError

from .core import ProductIn, ProductUpdate, generate_unique_id
from .database import JsonFileStore, Record
from .models import Product

logger = logging.getLogger(__name__)


def _find_index(records: List[Record], product_id: str) -> int:
    for index, record in enumerate(records):
        if isinstance(record, dict) and record.get("id") == product_id:
            return index
    return -1


class ProductStore:
    def __init__(self, files: JsonFileStore):
        self.files = files

    def get_all(self) -> List[Product]:
        products = []
        for record in self.files.read_all():
            try:
                products.append(Product.model_validate(record))
            except ValidationError as exc:
                logger.warning("skipping malformed product record %r: %s", record, exc)
        return products

    def get_by_id(self, product_id: str) -> Optional[Product]:
        for product in self.get_all():
            if product.id == product_id:
                return product
        return None

    def add(self, data: ProductIn) -> Optional[Product]:
        product = Product(id=generate_unique_id("prod_"), **data.model_dump())

        def _append(records: List[Record]) -> bool:
            records.append(product.model_dump())
            return True

        if not self.files.update(_append):
            return None
        logger.info("added product %s (%s)", product.id, product.name)
        return product

    def update(self, product_id: str, changes: ProductUpdate) -> bool:
        def _apply(records: List[Record]) -> bool:
            index = _find_index(records, product_id)
            if index == -1:
                logger.warning("update for unknown product %s", product_id)
                return False
            merged = {**records[index], **changes.model_dump(exclude_none=True), "id": product_id}
            try:
                # extra keys in the stored record are kept as they are
                records[index] = {**merged, **Product.model_validate(merged).model_dump()}
            except ValidationError as exc:
                logger.warning("product %s would become invalid: %s", product_id, exc)
                return False
            return True

        ok = self.files.update(_apply)
        if ok:
            logger.info("updated product %s", product_id)
        return ok

    def update_stock(self, product_id: str, quantity_change: float) -> bool:
        """
        Add ``quantity_change`` to a product's stock (negative to deduct).

        The result is floored at zero. Returns False when the product is
        unknown or the write fails.
        """
        def _adjust(records: List[Record]) -> bool:
            index = _find_index(records, product_id)
            if index == -1:
                logger.warning("stock change for unknown product %s", product_id)
                return False
            try:
                current = float(records[index].get("stock", 0))
            except (TypeError, ValueError):
                logger.warning("product %s has a non-numeric stock value", product_id)
                return False
            records[index]["stock"] = max(0.0, current + quantity_change)
            return True

        return self.files.update(_adjust)

    def delete(self, product_id: str) -> bool:
        def _remove(records: List[Record]) -> bool:
            kept = [r for r in records if not (isinstance(r, dict) and r.get("id") == product_id)]
            if len(kept) == len(records):
                return False
            records[:] = kept
            return True

        ok = self.files.update(_remove)
        if ok:
            logger.info("deleted product %s", product_id)
        return ok
