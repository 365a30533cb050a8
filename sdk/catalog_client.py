# sdk/catalog_client.py
from typing import Any, Dict, List, Optional

import httpx
import requests


class CatalogClient:
    def __init__(self, base_url: str = "http://localhost:8085", api_key: Optional[str] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.api_root = f"{self.base_url}/api/v1"
        self.session = requests.Session()
        self.timeout = timeout
        self.api_key = api_key
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    @staticmethod
    def _search_params(product_name: str, category: Optional[str] = None,
                       min_price: Optional[float] = None, max_price: Optional[float] = None,
                       status: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        params: Dict[str, Any] = {"product_name": product_name, "page": page, "limit": limit}
        if category:
            params["category"] = category
        if min_price is not None:
            params["minPrice"] = min_price
        if max_price is not None:
            params["maxPrice"] = max_price
        if status:
            params["status"] = status
        return params

    def health(self):
        r = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Products
    def list_products(self, page: int = 1, limit: int = 10):
        r = self.session.get(f"{self.api_root}/products", params={"page": page, "limit": limit}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def search_products(self, product_name: str, category: Optional[str] = None,
                        min_price: Optional[float] = None, max_price: Optional[float] = None,
                        status: Optional[str] = None, page: int = 1, limit: int = 10) -> List[Dict[str, Any]]:
        params = self._search_params(product_name, category, min_price, max_price, status, page, limit)
        r = self.session.get(f"{self.api_root}/products/search", params=params, timeout=self.timeout)
        # the API answers 404 when nothing matches; callers just want no rows
        if r.status_code == 404:
            return []
        r.raise_for_status()
        return r.json()

    def get_product(self, product_id: str):
        r = self.session.get(f"{self.api_root}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def create_product(self, name: str, description: str, price: float = 0,
                       categories: Optional[List[str]] = None, statuses: Optional[List[str]] = None):
        payload = {
            "name": name,
            "description": description,
            "price": price,
            "categories": categories or [],
            "variants": [{"stock_status": s} for s in (statuses or [])],
        }
        r = self.session.post(f"{self.api_root}/products", json=payload, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def update_product(self, product_id: str, **changes):
        r = self.session.patch(f"{self.api_root}/products/{product_id}", json=changes, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delete_product(self, product_id: str):
        r = self.session.delete(f"{self.api_root}/products/{product_id}", timeout=self.timeout)
        # do not raise_for_status() on 401/404, callers inspect the body
        if r.status_code in (401, 404):
            return r.json()
        r.raise_for_status()
        return r.json()

    # Async search (example)
    async def search_products_async(self, product_name: str, **filters) -> List[Dict[str, Any]]:
        params = self._search_params(product_name, **filters)
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        async with httpx.AsyncClient(timeout=self.timeout, headers=headers) as client:
            r = await client.get(f"{self.api_root}/products/search", params=params)
            if r.status_code == 404:
                return []
            r.raise_for_status()
            return r.json()


if __name__ == "__main__":
    import argparse
    from rich import print

    parser = argparse.ArgumentParser(description="Catalog API CLI")
    parser.add_argument("--base-url", default="http://127.0.0.1:8085")
    parser.add_argument("--token", help="API token for write operations")
    subparsers = parser.add_subparsers(dest="command", required=True)

    lp = subparsers.add_parser("list-products", help="List products page by page")
    lp.add_argument("--page", type=int, default=1)
    lp.add_argument("--limit", type=int, default=10)

    sp = subparsers.add_parser("search", help="Search products")
    sp.add_argument("--name", required=True, help="Product name (substring)")
    sp.add_argument("--category", help="Exact category name")
    sp.add_argument("--min-price", type=float)
    sp.add_argument("--max-price", type=float)
    sp.add_argument("--status", choices=["in_stock", "out_of_stock", "low_on_stock"])
    sp.add_argument("--page", type=int, default=1)
    sp.add_argument("--limit", type=int, default=10)

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True)

    cp = subparsers.add_parser("create-product", help="Create a product")
    cp.add_argument("--name", required=True)
    cp.add_argument("--description", required=True)
    cp.add_argument("--price", type=float, default=0)
    cp.add_argument("--category", action="append", default=[], help="Repeat for several categories")
    cp.add_argument("--status", action="append", default=[], help="Repeat for several variants")

    dp = subparsers.add_parser("delete-product", help="Delete a product")
    dp.add_argument("--product-id", required=True)

    args = parser.parse_args()
    c = CatalogClient(base_url=args.base_url, api_key=args.token)

    if args.command == "list-products":
        print(c.list_products(args.page, args.limit))
    elif args.command == "search":
        print(c.search_products(args.name, args.category, args.min_price, args.max_price,
                                args.status, args.page, args.limit))
    elif args.command == "get-product":
        print(c.get_product(args.product_id))
    elif args.command == "create-product":
        print(c.create_product(args.name, args.description, args.price, args.category, args.status))
    elif args.command == "delete-product":
        print(c.delete_product(args.product_id))
