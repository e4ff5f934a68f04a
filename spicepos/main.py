# spicepos/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import urlencode

from fastapi import Depends, FastAPI, Form, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from .config import Settings, get_settings
from .core import Flash, today
from .database import JsonFileStore
from .inventory import ProductStore
from .logic import manage_product_logic, process_sale_logic
from .sales import SalesStore, summarize

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("serving data from %s", settings.DATA_DIR.resolve())
    yield


app = FastAPI(title="spice-pos", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Stores (one per request, nothing cached)
# ---------------------------
def get_product_store(settings: Settings = Depends(get_settings)) -> ProductStore:
    return ProductStore(JsonFileStore(settings.products_path, settings.LOCK_TIMEOUT))


def get_sales_store(settings: Settings = Depends(get_settings)) -> SalesStore:
    return SalesStore(JsonFileStore(settings.sales_path, settings.LOCK_TIMEOUT), settings.TIMEZONE)


# ---------------------------
# Helpers
# ---------------------------
def _redirect(url: str, flash: Flash) -> RedirectResponse:
    query = urlencode({"message": flash.message, "message_type": flash.message_type})
    return RedirectResponse(f"{url}?{query}", status_code=303)


def _flash(message: Optional[str], message_type: Optional[str]) -> dict:
    if not message:
        return {"message": None, "message_type": None}
    try:
        flash = Flash(message=message, message_type=message_type or "success")
    except ValidationError:
        # unknown types from the query string fall back to the default
        flash = Flash(message=message)
    return flash.model_dump()


# ---------------------------
# Sale page
# ---------------------------
@app.get("/")
def sale_page(
    message: Optional[str] = None,
    message_type: Optional[str] = None,
    products: ProductStore = Depends(get_product_store),
):
    return {"products": [p.model_dump() for p in products.get_all()], **_flash(message, message_type)}


@app.post("/process_sale")
def process_sale(
    cart_data: str = Form(""),
    cart_total: str = Form("0"),
    sales: SalesStore = Depends(get_sales_store),
    products: ProductStore = Depends(get_product_store),
):
    flash = process_sale_logic(sales, products, cart_data, cart_total)
    return _redirect("/", flash)


@app.get("/process_sale")
def process_sale_wrong_method():
    return _redirect("/", Flash(message="Invalid access method.", message_type="error"))


# ---------------------------
# Product management
# ---------------------------
@app.get("/products")
def products_page(
    action: Optional[str] = None,
    product_id: Optional[str] = Query(None, alias="id"),
    message: Optional[str] = None,
    message_type: Optional[str] = None,
    products: ProductStore = Depends(get_product_store),
):
    flash = _flash(message, message_type)
    edit_product = None
    if action == "edit" and product_id:
        edit_product = products.get_by_id(product_id)
        if edit_product is None:
            flash = _flash(f"Product with ID {product_id} not found.", "error")
    return {
        "products": [p.model_dump() for p in products.get_all()],
        "edit_product": edit_product.model_dump() if edit_product else None,
        **flash,
    }


@app.get("/products/{product_id}")
def get_product(product_id: str, products: ProductStore = Depends(get_product_store)):
    p = products.get_by_id(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="product not found")
    return p


@app.post("/manage_product")
def manage_product(
    action: str = Form(""),
    product_id: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price_lkr: Optional[str] = Form(None),
    unit: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    products: ProductStore = Depends(get_product_store),
):
    form = {"name": name, "category": category, "price_lkr": price_lkr, "unit": unit, "stock": stock}
    flash = manage_product_logic(products, action, product_id, form)
    return _redirect("/products", flash)


@app.get("/manage_product")
def manage_product_wrong_method():
    return _redirect("/products", Flash(message="Invalid access method.", message_type="error"))


# ---------------------------
# Reports
# ---------------------------
@app.get("/reports")
def daily_report(
    date: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
    sales: SalesStore = Depends(get_sales_store),
):
    day = date or today(settings.TIMEZONE)
    day_sales = sales.get_sales_by_date(day)
    report = summarize(day, day_sales)
    return {**report.model_dump(), "sales": [s.model_dump() for s in day_sales]}


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("spicepos.main:app", host=settings.HOST, port=settings.PORT)
