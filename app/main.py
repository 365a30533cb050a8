# app/main.py
from contextlib import asynccontextmanager

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .auth import require_actor
from .config import get_settings
from .core import ProductCreate, ProductUpdate, field_errors, shape_product
from .database import get_session, init_db
from .errors import CatalogError, InternalError, ValidationFailed
from .logging_config import configure_logging
from .middleware import LoggingMiddleware
from .models import User
from .services import (
    create_product_logic, delete_product_logic, get_product_logic,
    list_products_logic, search_products_logic, update_product_logic
)

configure_logging()
logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("catalog_api_starting", env=settings.env)
    init_db()
    yield
    logger.info("catalog_api_stopped")


app = FastAPI(title="catalog-api", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count", "X-Total-Pages", "X-Current-Page", "X-Per-Page"],
)
app.add_middleware(LoggingMiddleware)


# ---------------------------
# Error handlers
# ---------------------------
@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    return JSONResponse(status_code=exc.status_code, content=exc.body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    failure = ValidationFailed(field_errors(exc.errors()))
    return JSONResponse(status_code=failure.status_code, content=failure.body())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", path=request.url.path)
    failure = InternalError()
    return JSONResponse(status_code=failure.status_code, content=failure.body())


@app.get("/health")
def health_check():
    return {"status": "ok"}


# ---------------------------
# Product endpoints
# ---------------------------
router = APIRouter(prefix=settings.api_prefix, tags=["products"])


@router.get("/products/search")
def search_products(request: Request, response: Response, session: Session = Depends(get_session)):
    page = search_products_logic(session, request.query_params)
    response.headers["X-Total-Count"] = str(page.total)
    response.headers["X-Total-Pages"] = str(page.total_pages)
    response.headers["X-Current-Page"] = str(page.page)
    response.headers["X-Per-Page"] = str(page.limit)
    return [shape_product(p) for p in page.items]


@router.get("/products")
def list_products(request: Request, session: Session = Depends(get_session)):
    return list_products_logic(session, request.query_params)


@router.post("/products", status_code=201)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
    actor: User = Depends(require_actor("create")),
):
    return create_product_logic(session, actor, payload)


@router.get("/products/{product_id}")
def get_product(product_id: str, session: Session = Depends(get_session)):
    return get_product_logic(session, product_id)


@router.patch("/products/{product_id}")
def update_product(
    product_id: str,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
    actor: User = Depends(require_actor("update")),
):
    return update_product_logic(session, actor, product_id, payload)


@router.delete("/products/{product_id}")
def delete_product(
    product_id: str,
    session: Session = Depends(get_session),
    actor: User = Depends(require_actor("delete")),
):
    return delete_product_logic(session, actor, product_id)


app.include_router(router)
