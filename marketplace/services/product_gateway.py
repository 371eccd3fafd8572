"""Product status port and its SQL implementation.

The catalog itself lives outside this service; the lifecycle only reads a
listing's status and flips it between available, pending and sold.
"""

import logging
from abc import ABC, abstractmethod

from sqlalchemy import update
from sqlalchemy.engine import Engine
from sqlmodel import Session

from marketplace.errors import NotFound
from marketplace.models.product import Product
from marketplace.models.transaction import utcnow
from marketplace.utils.constants import PRODUCT_STATUSES

logger = logging.getLogger(__name__)


class ProductStatusGateway(ABC):
    @abstractmethod
    def get_status(self, product_id: str) -> str:
        """Return the product's status. Raises NotFound."""

    @abstractmethod
    def set_status(self, product_id: str, status: str) -> None:
        """Set the product's status. Raises NotFound."""

    @abstractmethod
    def claim(self, product_id: str, expected: str, status: str) -> bool:
        """Move the product from ``expected`` to ``status`` atomically.

        Returns False if the product was not in ``expected`` (or is missing).
        """

    @abstractmethod
    def get_listing(self, product_id: str) -> Product:
        """Return the listing (seller and price). Raises NotFound."""


class SqlProductGateway(ProductStatusGateway):
    def __init__(self, engine: Engine):
        self._engine = engine

    def get_listing(self, product_id: str) -> Product:
        with Session(self._engine) as session:
            product = session.get(Product, product_id)
        if product is None:
            raise NotFound(f"Product {product_id} not found")
        return product

    def get_status(self, product_id: str) -> str:
        return self.get_listing(product_id).status

    def set_status(self, product_id: str, status: str) -> None:
        if status not in PRODUCT_STATUSES:
            raise ValueError(f"Unknown product status: {status}")
        with Session(self._engine) as session:
            product = session.get(Product, product_id)
            if product is None:
                raise NotFound(f"Product {product_id} not found")
            product.status = status
            product.updated_at = utcnow()
            session.add(product)
            session.commit()
        logger.info(f"Product {product_id} -> {status}")

    def claim(self, product_id: str, expected: str, status: str) -> bool:
        if status not in PRODUCT_STATUSES:
            raise ValueError(f"Unknown product status: {status}")
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .where(Product.status == expected)
            .values(status=status, updated_at=utcnow())
        )
        with Session(self._engine) as session:
            result = session.exec(stmt)
            if result.rowcount != 1:
                session.rollback()
                logger.debug(f"Claim on product {product_id} lost: not {expected}")
                return False
            session.commit()
        logger.info(f"Product {product_id} {expected} -> {status}")
        return True
