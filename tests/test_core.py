# tests/test_core.py
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.core import (
    ProductCreate, ProductDraft, VariantIn, field_errors,
    parse_list_params, parse_search_params, shape_product, slugify
)
from app.errors import BadRequest, ValidationFailed
from app.models import Category, Product, StockStatus


@pytest.mark.parametrize("name, slug", [
    ("Test Product", "test-product"),
    ("  Crème Brûlée  ", "creme-brulee"),
    ("100% Cotton -- T-Shirt!", "100-cotton-t-shirt"),
    ("***", ""),
])
def test_slugify(name, slug):
    assert slugify(name) == slug


def test_search_params_defaults():
    params = parse_search_params({"product_name": "lamp"})

    assert params.page == 1
    assert params.limit == 10
    assert params.category is None
    assert params.status is None


def test_search_params_read_camel_case_prices():
    params = parse_search_params({"product_name": "lamp", "minPrice": "9.5", "maxPrice": "20"})

    assert params.min_price == Decimal("9.5")
    assert params.max_price == Decimal("20")


def test_search_params_treat_blank_as_absent():
    params = parse_search_params({"product_name": " lamp ", "category": "", "status": "  "})

    assert params.product_name == "lamp"
    assert params.category is None
    assert params.status is None


def test_search_params_ignore_unknown_keys():
    params = parse_search_params({"product_name": "lamp", "sort": "price"})

    assert params.product_name == "lamp"


def test_blank_product_name_is_required():
    with pytest.raises(ValidationFailed) as excinfo:
        parse_search_params({"product_name": ""})

    assert excinfo.value.errors == {"product_name": ["The product name field is required."]}
    assert excinfo.value.body()["status"] == 400


def test_status_is_parsed_to_enum():
    params = parse_search_params({"product_name": "lamp", "status": "out_of_stock"})

    assert params.status is StockStatus.out_of_stock


def test_list_params_raise_bad_request():
    with pytest.raises(BadRequest):
        parse_list_params({"page": "-3"})

    assert parse_list_params({"limit": "500"}).limit == 500


def test_field_errors_strip_location_prefix_and_label_nested_fields():
    errors = field_errors([
        {"loc": ("body", "variants", 0, "stock_status"), "type": "enum", "ctx": {}},
        {"loc": ("query", "minPrice"), "type": "greater_than_equal", "ctx": {"ge": 0}},
        {"loc": ("query", "minPrice"), "type": "greater_than_equal", "ctx": {"ge": 0}},
    ])

    assert errors == {
        "variants.0.stock_status": ["The selected variants.0.stock status is invalid."],
        "minPrice": ["The min price field must be at least 0."],
    }


def test_product_draft_derives_slug_and_defaults():
    payload = ProductCreate(
        name="Garden Hose",
        description="15m",
        price=Decimal("12.50"),
        categories=["Garden", "Garden", "Outdoor"],
        variants=[VariantIn(stock_status="low_on_stock")],
    )

    draft = ProductDraft.from_payload(payload)

    assert draft.slug == "garden-hose"
    assert draft.tags == " "
    assert draft.image_url == " "
    assert draft.category_names == ["Garden", "Outdoor"]
    assert draft.variant_statuses == [StockStatus.low_on_stock]
    # the payload itself is left untouched
    assert payload.categories == ["Garden", "Garden", "Outdoor"]


def test_shape_product_dedupes_category_names_and_formats_dates():
    stamp = datetime(2024, 5, 1, 12, 30, 15, 123456)
    product = Product(
        id="abc",
        name="Lamp",
        description="Bright",
        price=Decimal("10.00"),
        categories=[Category(name="Home"), Category(name="Home"), Category(name="Light")],
        created_at=stamp,
        updated_at=stamp.replace(tzinfo=timezone.utc),
    )

    shaped = shape_product(product)

    assert shaped == {
        "id": "abc",
        "name": "Lamp",
        "description": "Bright",
        "price": Decimal("10.00"),
        "category": ["Home", "Light"],
        "created_at": "2024-05-01T12:30:15+00:00",
        "updated_at": "2024-05-01T12:30:15+00:00",
    }
