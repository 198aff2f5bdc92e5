"""
Catalog source: the system of record for products. The search core only reads it.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from .db import get_db, init_db
from .schema import CatalogItem
from ..util.logging import logger


class CatalogSource(ABC):
    """Read-only view of the product catalog used by the indexer."""

    @abstractmethod
    def list_all_items(self) -> List[CatalogItem]:
        """Return a snapshot of every item in the catalog."""
        pass


class StaticCatalog(CatalogSource):
    """Catalog backed by a fixed list of items."""

    def __init__(self, items: List[CatalogItem]):
        self._items = list(items)

    def list_all_items(self) -> List[CatalogItem]:
        return list(self._items)


def _row_to_item(row) -> CatalogItem:
    item_id, name, description, price, image_url = row
    return CatalogItem(
        id=item_id,
        name=name,
        description=description,
        price=Decimal(price),
        image_url=image_url,
    )


class SqliteCatalog(CatalogSource):
    """Catalog stored in the `product` table of a SQLite database."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        init_db(db_path)

    def list_all_items(self) -> List[CatalogItem]:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id, name, description, price, image_url FROM product ORDER BY id")
            return [_row_to_item(row) for row in cursor.fetchall()]

    def get_item(self, item_id: int) -> Optional[CatalogItem]:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, name, description, price, image_url FROM product WHERE id = ?",
                (item_id,)
            )
            row = cursor.fetchone()
            return _row_to_item(row) if row else None

    def search_by_name(self, term: str) -> List[CatalogItem]:
        """Case-insensitive substring match on the product name."""
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, name, description, price, image_url FROM product "
                "WHERE name LIKE ? COLLATE NOCASE ORDER BY id",
                (f"%{term.strip()}%",)
            )
            return [_row_to_item(row) for row in cursor.fetchall()]

    def add_item(self, name: str, description: str, price: Decimal, image_url: str = "") -> CatalogItem:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO product (name, description, price, image_url) VALUES (?, ?, ?, ?)",
                (name, description, str(price), image_url)
            )
            conn.commit()
            item_id = cursor.lastrowid

        logger.log_operation("catalog.add_item", "success", {"item_id": item_id, "name": name})
        return CatalogItem(id=item_id, name=name, description=description, price=Decimal(str(price)), image_url=image_url)

    def count_items(self) -> int:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM product")
            return cursor.fetchone()[0]
