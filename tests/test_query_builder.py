# tests/test_query_builder.py
from app.core import parse_search_params
from app.search import build_search_query, count_matches, search_products


def params(**raw):
    raw.setdefault("product_name", "Test")
    return parse_search_params({k: str(v) for k, v in raw.items()})


def test_only_name_filter_when_nothing_else_given():
    sql = str(build_search_query(params()))

    assert "lower(products.name)" in sql
    assert "LIKE" in sql
    assert "EXISTS" not in sql


def test_category_and_status_compile_to_exists():
    sql = str(build_search_query(params(category="Tools", status="in_stock")))

    assert sql.count("EXISTS") == 2


def test_many_matching_variants_yield_one_row(session, make_product):
    make_product(name="Test Multi", statuses=["in_stock", "in_stock", "in_stock"])

    page = search_products(session, params(status="in_stock"))

    assert [p.name for p in page.items] == ["Test Multi"]
    assert page.total == 1


def test_any_linked_category_satisfies_the_filter(session, make_product):
    make_product(name="Test Both", categories=["Tools", "Garden"])

    page = search_products(session, params(category="Garden"))

    assert [p.name for p in page.items] == ["Test Both"]


def test_total_counts_every_page(session, make_product):
    for i in range(5):
        make_product(name=f"Test {i}", price=10 * i)

    page = search_products(session, params(minPrice=10, page=2, limit=2))

    assert page.total == 4
    assert page.total_pages == 2
    assert len(page.items) == 2
    assert all(p.price >= 10 for p in page.items)


def test_empty_page_keeps_the_total(session, make_product):
    make_product(name="Test Alone")

    page = search_products(session, params(page=2, limit=1))

    assert page.is_empty
    assert page.total == 1
    assert count_matches(session, build_search_query(params())) == 1
