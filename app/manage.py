"""
Administrative commands.

    python -m app.manage init-db
    python -m app.manage create-user --name Alice --email alice@example.com
    python -m app.manage seed
"""

import argparse
from decimal import Decimal

import structlog
from rich import print
from sqlalchemy import select

from .auth import new_api_token
from .core import ProductCreate, ProductDraft, VariantIn
from .database import SessionLocal, init_db
from .logging_config import configure_logging
from .models import Category, StockStatus, User

configure_logging()
logger = structlog.get_logger(__name__)

DEMO_CATALOG = [
    ("Laptop Pro 14", "Aluminium ultrabook, 16GB RAM", "1499.00", ["Electronics", "Computers"],
     [StockStatus.in_stock]),
    ("Wireless Mouse", "Silent clicks, USB receiver", "24.90", ["Electronics", "Accessories"],
     [StockStatus.in_stock, StockStatus.low_on_stock]),
    ("Mechanical Keyboard", "Hot-swappable switches", "89.00", ["Electronics", "Accessories"],
     [StockStatus.out_of_stock]),
    ("Espresso Machine", "15 bar pump, steam wand", "349.00", ["Kitchen"],
     [StockStatus.low_on_stock]),
    ("Test Product", "Fixture used by the demo scripts", "150.00", [], []),
]


def create_user(name: str, email: str) -> User:
    with SessionLocal() as session:
        user = User(name=name, email=email, api_token=new_api_token())
        session.add(user)
        session.commit()
        logger.info("user_created", user_id=user.id, email=email)
        return user


def seed(owner_email: str = "seed@example.com") -> int:
    init_db()
    with SessionLocal() as session:
        owner = session.scalar(select(User).where(User.email == owner_email))
        if owner is None:
            owner = User(name="Seeder", email=owner_email, api_token=new_api_token())
            session.add(owner)

        categories = {}
        created = 0
        for name, description, price, category_names, statuses in DEMO_CATALOG:
            draft = ProductDraft.from_payload(ProductCreate(
                name=name,
                description=description,
                price=Decimal(price),
                categories=category_names,
                variants=[VariantIn(stock_status=s) for s in statuses],
            ))
            linked = []
            for category_name in draft.category_names:
                if category_name not in categories:
                    categories[category_name] = (
                        session.scalar(select(Category).where(Category.name == category_name))
                        or Category(name=category_name)
                    )
                linked.append(categories[category_name])
            session.add(draft.to_entity(owner, linked))
            created += 1
        session.commit()
        logger.info("catalog_seeded", products=created, categories=len(categories))
        return created


def main(argv=None):
    parser = argparse.ArgumentParser(description="catalog-api admin commands")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create all tables")

    cu = subparsers.add_parser("create-user", help="Create a user and print its API token")
    cu.add_argument("--name", required=True)
    cu.add_argument("--email", required=True)

    sd = subparsers.add_parser("seed", help="Insert a small demo catalog")
    sd.add_argument("--owner-email", default="seed@example.com")

    args = parser.parse_args(argv)

    if args.command == "init-db":
        init_db()
        print("[green]Tables created[/green]")
    elif args.command == "create-user":
        init_db()
        user = create_user(args.name, args.email)
        print(f"[green]User {user.email} created[/green]")
        print(f"API token: [bold]{user.api_token}[/bold]")
    elif args.command == "seed":
        count = seed(args.owner_email)
        print(f"[green]Seeded {count} products[/green]")


if __name__ == "__main__":
    main()
