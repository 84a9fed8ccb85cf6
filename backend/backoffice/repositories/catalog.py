"""
Catalog lookup over the product and category tables.
"""
from collections.abc import Iterable
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select

from backoffice.models.category import Category
from backoffice.models.product import Product
from backoffice.repositories.base import BaseRepository


def parse_uuid(value: object) -> Optional[UUID]:
    """Return the UUID a reference denotes, or None if it is not UUID-shaped."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class ProductRepository(BaseRepository[Product]):
    """Repository for Product lookups."""

    model = Product

    async def resolve(self, product_ref: object) -> Optional[Product]:
        """
        Resolve a cart reference to a product.

        UUID-shaped references are primary keys; anything else is looked
        up as the legacy external identifier.
        """
        product_id = parse_uuid(product_ref)
        if product_id is not None:
            return await self.get_by_id(product_id)

        stmt = select(Product).where(Product.external_id == str(product_ref))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, product_ids: Iterable[UUID]) -> dict[UUID, Product]:
        """Fetch several products keyed by id; missing ids are absent."""
        ids = list(product_ids)
        if not ids:
            return {}
        stmt = select(Product).where(Product.id.in_(ids))
        result = await self.session.execute(stmt)
        return {product.id: product for product in result.scalars().all()}


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category lookups."""

    model = Category

    async def display_names(self, refs: Iterable[str]) -> dict[str, str]:
        """
        Map product category references to category names.

        A reference matches a category by id first, then by name.
        Unmatched references are left out of the result.
        """
        refs = {ref for ref in refs if ref}
        if not refs:
            return {}

        ids = [parsed for parsed in (parse_uuid(ref) for ref in refs) if parsed]
        conditions = [Category.name.in_(refs)]
        if ids:
            conditions.append(Category.id.in_(ids))

        stmt = select(Category).where(or_(*conditions))
        result = await self.session.execute(stmt)
        categories = list(result.scalars().all())

        by_id = {str(category.id): category.name for category in categories}
        by_name = {category.name: category.name for category in categories}

        names: dict[str, str] = {}
        for ref in refs:
            parsed = parse_uuid(ref)
            if parsed is not None and str(parsed) in by_id:
                names[ref] = by_id[str(parsed)]
            elif ref in by_name:
                names[ref] = by_name[ref]
        return names
