import math
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .core import (
    ProductCreate, ProductDraft, ProductUpdate, parse_list_params,
    distinct_names, parse_search_params, shape_product, shape_summary, slugify
)
from .errors import InternalError, NoSearchResults, ProductNotFound, Unauthorized
from .models import Category, Product, User
from .search import SearchPage, search_products

# This file contains the logic behind every catalog endpoint. Handlers take
# the session and the resolved actor as arguments and raise CatalogError
# subclasses for every non-success outcome.

logger = structlog.get_logger(__name__)


@contextmanager
def _persistence_guard(session: Session, operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("persistence_failed", operation=operation)
        raise InternalError() from exc


def _load_product(session: Session, product_id: str) -> Product:
    product = session.scalar(
        select(Product)
        .options(selectinload(Product.categories))
        .where(Product.id == product_id)
    )
    if product is None:
        raise ProductNotFound(product_id)
    return product


def _resolve_categories(session: Session, names: List[str]) -> List[Category]:
    if not names:
        return []
    existing: Dict[str, Category] = {}
    for category in session.scalars(select(Category).where(Category.name.in_(names))):
        existing.setdefault(category.name, category)
    resolved = []
    for name in names:
        category = existing.get(name)
        if category is None:
            category = Category(name=name)
            session.add(category)
            existing[name] = category
        resolved.append(category)
    return resolved


# Search
def search_products_logic(session: Session, raw_params: Mapping[str, Any]) -> SearchPage:
    params = parse_search_params(raw_params)
    with _persistence_guard(session, "search"):
        page = search_products(session, params)
    logger.info(
        "product_search",
        product_name=params.product_name,
        category=params.category,
        status=params.status.value if params.status else None,
        page=page.page,
        limit=page.limit,
        total=page.total,
    )
    if page.is_empty:
        raise NoSearchResults()
    return page


# Listing
def list_products_logic(session: Session, raw_params: Mapping[str, Any]) -> Dict[str, Any]:
    params = parse_list_params(raw_params)
    offset = (params.page - 1) * params.limit
    try:
        products = session.scalars(
            select(Product).order_by(Product.id).offset(offset).limit(params.limit)
        ).all()
        total_items = session.scalar(select(func.count()).select_from(Product)) or 0
    except Exception as exc:
        session.rollback()
        logger.exception("product_list_failed", page=params.page, limit=params.limit)
        raise InternalError() from exc

    total_pages = math.ceil(total_items / params.limit)
    return {
        "success": True,
        "message": "Products retrieved successfully",
        "products": [shape_summary(p) for p in products],
        "pagination": {
            "totalItems": total_items,
            "totalPages": total_pages,
            "currentPage": params.page,
        },
        "status_code": 200,
    }


def get_product_logic(session: Session, product_id: str) -> Dict[str, Any]:
    with _persistence_guard(session, "show"):
        product = _load_product(session, product_id)
    return shape_product(product)


# Mutations
def create_product_logic(session: Session, actor: Optional[User], payload: ProductCreate) -> Dict[str, Any]:
    if actor is None:
        raise Unauthorized("create")

    draft = ProductDraft.from_payload(payload)
    with _persistence_guard(session, "create"):
        categories = _resolve_categories(session, draft.category_names)
        product = draft.to_entity(actor, categories)
        session.add(product)
        session.commit()

    logger.info("product_created", product_id=product.id, slug=product.slug, user_id=actor.id)
    return {
        "message": "Product created successfully",
        "status_code": 201,
        "data": {
            "product_id": product.id,
            "name": product.name,
            "description": product.description,
        },
    }


def update_product_logic(
    session: Session, actor: Optional[User], product_id: str, payload: ProductUpdate
) -> Dict[str, Any]:
    if actor is None:
        raise Unauthorized("update")

    with _persistence_guard(session, "update"):
        product = _load_product(session, product_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes:
            product.name = changes["name"]
            product.slug = slugify(changes["name"])
        if "description" in changes:
            product.description = changes["description"]
        if "price" in changes:
            product.price = changes["price"]
        if payload.categories is not None:
            product.categories = _resolve_categories(session, distinct_names(payload.categories))
        session.commit()

    logger.info("product_updated", product_id=product_id, fields=sorted(changes), user_id=actor.id)
    return shape_product(product)


def delete_product_logic(session: Session, actor: Optional[User], product_id: str) -> Dict[str, Any]:
    if actor is None:
        raise Unauthorized("delete")

    with _persistence_guard(session, "delete"):
        product = session.get(Product, product_id)
        if product is None:
            raise ProductNotFound(product_id)
        session.delete(product)
        session.commit()

    logger.info("product_deleted", product_id=product_id, user_id=actor.id)
    return {"message": "Product deleted successfully."}
