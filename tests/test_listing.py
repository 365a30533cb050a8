# tests/test_listing.py
from app import main, manage
from app.database import get_session
from app.main import app

PRODUCTS = "/api/v1/products"


def test_list_products_pagination_metadata(client, make_product):
    for i in range(3):
        make_product(name=f"Item {i}", price=i + 1)

    r = client.get(PRODUCTS, params={"page": 1, "limit": 2})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Products retrieved successfully"
    assert body["status_code"] == 200
    assert body["pagination"] == {"totalItems": 3, "totalPages": 2, "currentPage": 1}
    assert len(body["products"]) == 2
    for p in body["products"]:
        assert set(p) == {"name", "price"}


def test_list_products_second_page_holds_the_rest(client, make_product):
    for i in range(3):
        make_product(name=f"Item {i}")

    first = client.get(PRODUCTS, params={"page": 1, "limit": 2}).json()["products"]
    second = client.get(PRODUCTS, params={"page": 2, "limit": 2}).json()

    assert second["pagination"]["currentPage"] == 2
    assert len(second["products"]) == 1
    seen = {p["name"] for p in first + second["products"]}
    assert seen == {"Item 0", "Item 1", "Item 2"}


def test_list_products_defaults(client, make_product):
    make_product(name="Only One")

    body = client.get(PRODUCTS).json()

    assert body["pagination"] == {"totalItems": 1, "totalPages": 1, "currentPage": 1}


def test_list_products_empty_store_is_ok(client):
    r = client.get(PRODUCTS)

    assert r.status_code == 200
    assert r.json()["products"] == []
    assert r.json()["pagination"]["totalPages"] == 0


def test_list_products_rejects_bad_params(client):
    for params in ({"page": 0}, {"limit": 0}, {"page": "abc"}, {"limit": "1.5"}):
        r = client.get(PRODUCTS, params=params)
        assert r.status_code == 400
        assert r.json() == {
            "status": "bad request",
            "message": "Invalid query params passed",
            "status_code": 400,
        }


def test_list_products_rejects_out_of_range_paging(client, make_product):
    make_product()

    for params in ({"page": "100000000000000000000"}, {"limit": str(2 ** 31 + 1)}):
        r = client.get(PRODUCTS, params=params)
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid query params passed"


def test_list_products_internal_error(client):
    class BrokenSession:
        def scalars(self, *args, **kwargs):
            raise RuntimeError("database is gone")

        def rollback(self):
            pass

    def _broken():
        yield BrokenSession()

    app.dependency_overrides[get_session] = _broken

    r = client.get(PRODUCTS)

    assert r.status_code == 500
    assert r.json() == {"status": "error", "message": "Internal server error", "status_code": 500}


def test_health_and_correlation_id(client):
    r = client.get("/health", headers={"X-Correlation-ID": "abc-123"})

    assert r.json() == {"status": "ok"}
    assert r.headers["X-Correlation-ID"] == "abc-123"


def test_loggers_are_named_after_their_modules():
    assert main.logger.bind().name == "app.main"
    assert manage.logger.bind().name == "app.manage"
