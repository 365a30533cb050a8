#!/usr/bin/env python
"""Walk a running catalog API through its endpoints.

Start the server and create a user first:

    python -m app.manage create-user --name Demo --email demo@example.com
    uvicorn app.main:app --port 8085
    CATALOG_API_TOKEN=<token> python demo.py
"""
import asyncio
import os

from sdk.catalog_client import CatalogClient


def main():
    c = CatalogClient(base_url="http://127.0.0.1:8085", api_key=os.getenv("CATALOG_API_TOKEN"))

    # -----------------------------
    # Create products
    # -----------------------------
    print("Creating products...")
    laptop = c.create_product("Demo Laptop", "14 inch ultrabook", 1499.0, ["Electronics"], ["in_stock"])
    mouse = c.create_product("Demo Mouse", "Wireless mouse", 24.9, ["Electronics", "Accessories"], ["low_on_stock"])
    print(laptop)
    print(mouse)

    # -----------------------------
    # List products
    # -----------------------------
    print("\nListing products (page 1, 5 per page)...")
    print(c.list_products(page=1, limit=5))

    # -----------------------------
    # Search products
    # -----------------------------
    print("\nSearching 'demo' in Electronics between 20 and 100...")
    print(c.search_products("demo", category="Electronics", min_price=20, max_price=100))

    print("\nSearching 'demo' with low stock...")
    print(c.search_products("demo", status="low_on_stock"))

    print("\nSearching something that does not exist...")
    print(c.search_products("no-such-product"))

    print("\nSearching concurrently...")
    results = asyncio.run(_search_many(c, ["demo", "laptop", "mouse"]))
    for term, rows in results:
        print(term, "->", [r["name"] for r in rows])

    # -----------------------------
    # Delete products
    # -----------------------------
    print("\nDeleting products...")
    print(c.delete_product(laptop["data"]["product_id"]))
    print(c.delete_product(mouse["data"]["product_id"]))
    print(c.delete_product(mouse["data"]["product_id"]))


async def _search_many(c: CatalogClient, terms):
    rows = await asyncio.gather(*(c.search_products_async(t) for t in terms))
    return list(zip(terms, rows))


if __name__ == "__main__":
    main()
