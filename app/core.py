import re
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import BadRequest, ValidationFailed
from .models import Category, Product, ProductVariant, StockStatus, User

# Request DTOs, validation-message translation, slug derivation and the
# response shapes shared by the service layer.


# ---------------------------
# Query-string models
# ---------------------------
# keeps (page - 1) * limit inside a signed 64-bit OFFSET
MAX_PAGE = 2 ** 31


class _QueryParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _blank_is_absent(cls, data: Any) -> Any:
        # "?category=" behaves like the parameter was never sent
        if not isinstance(data, Mapping):
            return data
        cleaned = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip()
                if value == "":
                    continue
            cleaned[key] = value
        return cleaned


class SearchParams(_QueryParams):
    product_name: str = Field(max_length=255)
    category: Optional[str] = Field(None, max_length=255)
    min_price: Optional[Decimal] = Field(None, alias="minPrice", ge=0)
    max_price: Optional[Decimal] = Field(None, alias="maxPrice", ge=0)
    status: Optional[StockStatus] = None
    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(10, ge=1, le=100)


class ListParams(_QueryParams):
    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(10, ge=1, le=MAX_PAGE)


# ---------------------------
# Body models
# ---------------------------
class VariantIn(BaseModel):
    stock_status: StockStatus = StockStatus.in_stock


class ProductCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    categories: List[str] = Field(default_factory=list)
    variants: List[VariantIn] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    categories: Optional[List[str]] = None


# ---------------------------
# Validation messages
# ---------------------------
def _attribute_label(name: str) -> str:
    """``product_name`` -> ``product name``, ``minPrice`` -> ``min price``."""
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", name)
    return spaced.replace("_", " ").lower()


def _message_for(label: str, error: Mapping[str, Any]) -> str:
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}
    if kind == "missing":
        return f"The {label} field is required."
    if kind == "string_too_short" and ctx.get("min_length") == 1:
        return f"The {label} field is required."
    if kind == "string_too_short":
        return f"The {label} field must be at least {ctx.get('min_length')} characters."
    if kind == "string_too_long":
        return f"The {label} field must not be greater than {ctx.get('max_length')} characters."
    if kind == "string_type":
        return f"The {label} field must be a string."
    if kind in ("int_parsing", "int_from_float", "int_type"):
        return f"The {label} field must be an integer."
    if kind in ("decimal_parsing", "decimal_type", "float_parsing", "float_type", "finite_number"):
        return f"The {label} field must be a number."
    if kind in ("decimal_max_digits", "decimal_max_places", "decimal_whole_digits"):
        return f"The {label} field has too many digits."
    if kind == "greater_than_equal":
        return f"The {label} field must be at least {ctx.get('ge')}."
    if kind == "less_than_equal":
        return f"The {label} field must not be greater than {ctx.get('le')}."
    if kind in ("enum", "literal_error"):
        return f"The selected {label} is invalid."
    if kind == "list_type":
        return f"The {label} field must be an array."
    return f"The {label} field is invalid."


def field_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic/FastAPI error dicts into ``{field: [message, ...]}``."""
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        key = ".".join(loc) or "request"
        message = _message_for(_attribute_label(key), error)
        messages = grouped.setdefault(key, [])
        if message not in messages:
            messages.append(message)
    return grouped


def parse_search_params(raw: Mapping[str, Any]) -> SearchParams:
    try:
        return SearchParams.model_validate(dict(raw))
    except ValidationError as exc:
        raise ValidationFailed(field_errors(exc.errors())) from exc


def parse_list_params(raw: Mapping[str, Any]) -> ListParams:
    try:
        return ListParams.model_validate(dict(raw))
    except ValidationError as exc:
        raise BadRequest() from exc


# ---------------------------
# Slugs & drafts
# ---------------------------
def slugify(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")


@dataclass
class ProductDraft:
    """Everything needed to persist a new product, derived up front from the payload."""

    name: str
    slug: str
    description: str
    price: Decimal
    tags: str = " "
    image_url: str = " "
    category_names: List[str] = field(default_factory=list)
    variant_statuses: List[StockStatus] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: ProductCreate) -> "ProductDraft":
        return cls(
            name=payload.name,
            slug=slugify(payload.name),
            description=payload.description,
            price=payload.price,
            category_names=distinct_names(payload.categories),
            variant_statuses=[v.stock_status for v in payload.variants],
        )

    def to_entity(self, owner: User, categories: List[Category]) -> Product:
        return Product(
            owner=owner,
            name=self.name,
            slug=self.slug,
            description=self.description,
            price=self.price,
            tags=self.tags,
            image_url=self.image_url,
            categories=categories,
            variants=[ProductVariant(stock_status=s) for s in self.variant_statuses],
        )


def distinct_names(names: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(n for n in names if n))


# ---------------------------
# Response shapes
# ---------------------------
def _iso(value: datetime) -> str:
    # sqlite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat(timespec="seconds")


def shape_product(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "category": distinct_names(c.name for c in product.categories),
        "created_at": _iso(product.created_at),
        "updated_at": _iso(product.updated_at),
    }


def shape_summary(product: Product) -> Dict[str, Any]:
    return {"name": product.name, "price": product.price}
