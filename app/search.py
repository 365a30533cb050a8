"""
Product search query builder.

``build_search_query`` turns validated ``SearchParams`` into a single
SQLAlchemy ``select()``; every active filter is ANDed onto it. Category and
stock-status filters are existential: ``relationship.any(...)`` renders an
``EXISTS`` sub-select, so a product matches when at least one related row
does, no matter how many.

``search_products`` runs that query for one page and counts the full match
set from the same statement, giving callers both the slice and the total.
"""

import math
from dataclasses import dataclass
from typing import List

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, selectinload

from .core import SearchParams
from .models import Category, Product, ProductVariant


@dataclass
class SearchPage:
    items: List[Product]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def is_empty(self) -> bool:
        return not self.items


def build_search_query(params: SearchParams) -> Select:
    query = select(Product).where(
        Product.name.icontains(params.product_name, autoescape=True)
    )

    if params.category is not None:
        query = query.where(Product.categories.any(Category.name == params.category))

    if params.min_price is not None:
        query = query.where(Product.price >= params.min_price)

    if params.max_price is not None:
        query = query.where(Product.price <= params.max_price)

    if params.status is not None:
        query = query.where(Product.variants.any(ProductVariant.stock_status == params.status))

    return query


def count_matches(session: Session, query: Select) -> int:
    counted = select(func.count()).select_from(query.order_by(None).subquery())
    return session.scalar(counted) or 0


def search_products(session: Session, params: SearchParams) -> SearchPage:
    query = build_search_query(params)
    offset = (params.page - 1) * params.limit

    page_query = (
        query.options(selectinload(Product.categories))
        .order_by(Product.id)
        .offset(offset)
        .limit(params.limit)
    )
    items = list(session.scalars(page_query).all())
    total = count_matches(session, query)
    return SearchPage(items=items, total=total, page=params.page, limit=params.limit)
