import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog import Catalog
from config import Settings, load_settings
from errors import RepositoryError, StoreError
from orders import filter_orders, price_order, validate_order
from pricing import quote_product
from repository import OrderStore, create_store
from schemas import CreateOrderResponse, Decoration, PriceQuote, Product, UploadResponse
from uploads import PUBLIC_PREFIX, check_upload, save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def get_store(request: Request) -> OrderStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# ---------------------- Catalog ----------------------

@router.get("/products", response_model=List[Product])
def list_products(type: Optional[str] = None, catalog: Catalog = Depends(get_catalog)):
    return catalog.products(type=type)


@router.get("/products/{name}", response_model=Product)
def get_product(name: str, catalog: Catalog = Depends(get_catalog)):
    return catalog.get_product(name)


@router.get("/decorations", response_model=List[Decoration])
def list_decorations(catalog: Catalog = Depends(get_catalog)):
    return catalog.decorations()


@router.get("/decorations/{name}", response_model=Decoration)
def get_decoration(name: str, catalog: Catalog = Depends(get_catalog)):
    return catalog.get_decoration(name)


@router.get("/pricing/quote", response_model=PriceQuote)
def get_quote(
    product: str = Query(..., description="Product name"),
    quantity: int = Query(1, ge=1),
    catalog: Catalog = Depends(get_catalog),
):
    return quote_product(catalog.get_product(product), quantity)


# ---------------------- Orders ----------------------

@router.get("/orders")
def list_orders(
    q: Optional[str] = Query(None, description="Substring of id, product, customer name or email"),
    status: Optional[str] = None,
    design_type: Optional[str] = Query(None, alias="designType"),
    store: OrderStore = Depends(get_store),
) -> Dict[str, Any]:
    try:
        docs = store.list_orders()
    except RepositoryError:
        logger.exception("Failed to read orders")
        raise HTTPException(status_code=500, detail="Failed to fetch orders")
    return {"orders": filter_orders(docs, q=q, status=status, design_type=design_type)}


@router.post("/orders", status_code=201, response_model=CreateOrderResponse)
def create_order(
    payload: Dict[str, Any] = Body(...),
    catalog: Catalog = Depends(get_catalog),
    store: OrderStore = Depends(get_store),
):
    order = price_order(validate_order(payload), catalog)

    try:
        doc = store.append(order)
    except RepositoryError:
        logger.exception("Failed to save order %s", order.id)
        raise HTTPException(status_code=500, detail="Failed to create order")

    logger.info("Created order %s for %s", order.id, order.customer_email)
    return CreateOrderResponse(message="Order created successfully", order=doc)


# ---------------------- Uploads ----------------------

@router.post("/upload", response_model=UploadResponse)
def upload_design(
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    # reject on the declared size and type before reading the body
    if file.size is not None:
        check_upload(file.size, file.content_type or "", settings.max_upload_bytes, original_name=file.filename)

    data = file.file.read()
    try:
        stored = save_upload(
            file.filename,
            file.content_type or "",
            data,
            settings.upload_dir,
            max_bytes=settings.max_upload_bytes,
        )
    except RepositoryError:
        raise HTTPException(status_code=500, detail="Failed to upload file")

    return UploadResponse(message="File uploaded successfully", filename=stored.filename, filepath=stored.filepath)


# ---------------------- Errors ----------------------

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def store_error_handler(request: Request, exc: StoreError):
    return _error(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error(400, message)


# ---------------------- App ----------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    os.makedirs(app.state.settings.upload_dir, exist_ok=True)
    yield


def create_app(settings: Optional[Settings] = None, store: Optional[OrderStore] = None,
               catalog: Optional[Catalog] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="Storefront Orders API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.catalog = catalog or Catalog.from_dir(settings.catalog_dir)
    app.state.store = store or create_store(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.get("/")
    def root():
        return {"service": "Storefront Orders API", "status": "ok"}

    @app.get("/test")
    def test_storage():
        store = app.state.store
        response = {
            "backend": "✅ Running",
            "order_store": store.backend,
            "orders": None,
            "catalog": {
                "products": len(app.state.catalog.products()),
                "decorations": len(app.state.catalog.decorations()),
            },
            "upload_dir": "✅ Present" if os.path.isdir(settings.upload_dir) else "❌ Missing",
        }
        try:
            response["orders"] = len(store.list_orders())
            response["storage"] = "✅ Connected & Working"
        except RepositoryError as e:
            response["storage"] = f"❌ Error: {e.message[:80]}"
        return response

    app.include_router(router)

    # upload_dir is created on startup, not at import
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="custom-designs")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
