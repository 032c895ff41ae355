"""Product sale-state store: the only place checkout reads or writes ``sold``.

``set_sold`` is a conditional write. It changes the row only if the flag
differs from the requested value and returns ``None`` when nothing changed,
so exactly one of several concurrent callers observes the transition.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from decimal import Decimal
from typing import Optional, Protocol

from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.webhook_events import StoreUnavailable


class ProductRecord(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    sold: bool

    model_config = {"from_attributes": True, "frozen": True}


class ProductStore(Protocol):
    async def get(self, product_id: int) -> ProductRecord | None: ...

    async def set_sold(self, product_id: int, value: bool) -> ProductRecord | None: ...


def _record(row) -> ProductRecord:
    return ProductRecord(
        id=row[0],
        name=row[1],
        description=row[2],
        price=row[3],
        sold=bool(row[4]),
    )


# ---------------------------------------------------------------------------
# SQL-backed store
# ---------------------------------------------------------------------------

class SqlProductStore:
    """Product store over the ``products`` table.

    The conditional UPDATE takes the row lock, so a second concurrent
    transaction re-evaluates ``sold <> :sold`` after the first commits and
    matches nothing.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, product_id: int) -> ProductRecord | None:
        try:
            result = await self._db.execute(
                text(
                    "SELECT id, name, description, price, sold "
                    "FROM products WHERE id = :product_id"
                ),
                {"product_id": product_id},
            )
        except (DBAPIError, OSError) as exc:
            raise StoreUnavailable(str(exc)) from exc

        row = result.fetchone()
        return _record(row) if row is not None else None

    async def set_sold(self, product_id: int, value: bool) -> ProductRecord | None:
        try:
            result = await self._db.execute(
                text(
                    "UPDATE products SET sold = :sold "
                    "WHERE id = :product_id AND sold <> :sold "
                    "RETURNING id, name, description, price, sold"
                ),
                {"product_id": product_id, "sold": value},
            )
            row = result.fetchone()
            await self._db.commit()
        except (DBAPIError, OSError) as exc:
            await self._db.rollback()
            raise StoreUnavailable(str(exc)) from exc

        return _record(row) if row is not None else None


# ---------------------------------------------------------------------------
# In-process store
# ---------------------------------------------------------------------------

class InMemoryProductStore:
    """Dict-backed store that serializes writes per product id."""

    def __init__(self, products: list[ProductRecord] | None = None) -> None:
        self._products: dict[int, ProductRecord] = {
            p.id: p for p in (products or [])
        }
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.write_count = 0

    async def get(self, product_id: int) -> ProductRecord | None:
        return self._products.get(product_id)

    async def set_sold(self, product_id: int, value: bool) -> ProductRecord | None:
        async with self._locks[product_id]:
            current = self._products.get(product_id)
            if current is None or current.sold == value:
                return None
            updated = current.model_copy(update={"sold": value})
            self._products[product_id] = updated
            self.write_count += 1
            return updated
