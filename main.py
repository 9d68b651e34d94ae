import os
from typing import List, Optional

import structlog
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field

load_dotenv()

from database import StorageError, db, get_record_store
from notifications import gemini_generate, generate_admin_notification, whatsapp_link
from orders import summarize_orders
from registry import RegistryService, shop_to_seller
from schemas import CartLine, PayoutInfo, Product

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
)
logger = structlog.get_logger(__name__)

app = FastAPI(title="PK-Mart Marketplace API", version="0.2.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

registry_service = RegistryService(get_record_store())


# ---------------------- Dependencies ----------------------

def get_registry() -> RegistryService:
    return registry_service


def get_text_generator():
    return gemini_generate


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("storage_error", path=request.url.path, error=str(exc)[:200])
    return JSONResponse(status_code=500, content={"detail": f"Storage error: {str(exc)[:100]}"})


def public_shop(shop) -> dict:
    return shop.model_dump(exclude={"otp_code"})


# ---------------------- Shops / Onboarding ----------------------

class ShopCreateRequest(BaseModel):
    name: str
    email: EmailStr
    whatsapp_number: str
    category: str = "General"
    payout_info: Optional[PayoutInfo] = None


class VerifyRequest(BaseModel):
    code: str


@app.post("/api/shops")
async def create_shop(
    payload: ShopCreateRequest,
    registry: RegistryService = Depends(get_registry),
    generator=Depends(get_text_generator),
):
    shop = await registry.create_shop(
        name=payload.name,
        email=payload.email,
        whatsapp=payload.whatsapp_number,
        category=payload.category,
        payout_info=payload.payout_info,
    )
    notification = await generate_admin_notification("NEW_SELLER", shop_to_seller(shop), generator=generator)
    # No SMS gateway in the demo, so the code goes back to the registrant.
    return {
        "shop": shop.model_dump(),
        "notification": notification.model_dump(),
        "whatsapp_url": whatsapp_link(notification.content.whatsapp),
    }


@app.post("/api/shops/{shop_id}/verify")
async def verify_shop(shop_id: str, payload: VerifyRequest, registry: RegistryService = Depends(get_registry)):
    if not await registry.verify_otp(shop_id, payload.code):
        raise HTTPException(status_code=400, detail="Invalid verification code")
    return {"verified": True}


@app.post("/api/admin/shops/{shop_id}/approve")
async def approve_shop(shop_id: str, registry: RegistryService = Depends(get_registry)):
    shop = await registry.approve_shop(shop_id)
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")
    return public_shop(shop)


@app.get("/api/shops")
async def list_shops(registry: RegistryService = Depends(get_registry)):
    return [public_shop(s) for s in await registry.fetch_all_shops()]


@app.get("/api/shops/{slug}")
async def get_shop(slug: str, registry: RegistryService = Depends(get_registry)):
    shop = await registry.fetch_shop_by_slug(slug.lower())
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")
    return public_shop(shop)


@app.get("/api/sellers")
async def list_sellers(registry: RegistryService = Depends(get_registry)):
    return [s.model_dump() for s in await registry.fetch_all_sellers()]


@app.post("/api/admin/sellers/{seller_id}/toggle")
async def toggle_seller(seller_id: str, registry: RegistryService = Depends(get_registry)):
    sellers = await registry.toggle_shop_status(seller_id)
    return [s.model_dump() for s in sellers]


# ---------------------- Products ----------------------

class ProductCreateRequest(BaseModel):
    shop_id: str
    name: str
    price: float = Field(..., ge=0)
    description: str = ""
    category: str = "General"
    image_url: Optional[str] = None
    stock: int = Field(0, ge=0)
    sizes: List[str] = Field(default_factory=list)
    published: bool = True


@app.post("/api/products")
async def create_product(payload: ProductCreateRequest, registry: RegistryService = Depends(get_registry)):
    if not await registry.fetch_shop(payload.shop_id):
        raise HTTPException(status_code=404, detail="Shop not found")
    product = await registry.create_product(**payload.model_dump())
    return product.model_dump()


@app.put("/api/products/{product_id}")
async def save_product(product_id: str, product: Product, registry: RegistryService = Depends(get_registry)):
    if product.id != product_id:
        raise HTTPException(status_code=400, detail="Product id mismatch")
    await registry.save_product(product)
    return {"saved": True}


@app.get("/api/products")
async def list_products(registry: RegistryService = Depends(get_registry)):
    return [p.model_dump() for p in await registry.fetch_all_products()]


@app.get("/api/shops/{shop_id}/products")
async def list_shop_products(shop_id: str, published_only: bool = True, registry: RegistryService = Depends(get_registry)):
    products = await registry.fetch_products_by_shop(shop_id, published_only=published_only)
    return [p.model_dump() for p in products]


# ---------------------- Orders ----------------------

class CheckoutItem(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    size: Optional[str] = None


class CheckoutRequest(BaseModel):
    shop_slug: str
    items: List[CheckoutItem]
    customer_name: str
    customer_phone: str
    customer_address: str
    customer_email: Optional[str] = None
    payment_method: str = "cod"


class OrderStatusRequest(BaseModel):
    status: str


@app.post("/api/checkout")
async def checkout(
    payload: CheckoutRequest,
    registry: RegistryService = Depends(get_registry),
    generator=Depends(get_text_generator),
):
    shop = await registry.fetch_shop_by_slug(payload.shop_slug.lower())
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")
    if shop.status != "active":
        raise HTTPException(status_code=400, detail="Shop is not accepting orders")
    if not payload.items:
        raise HTTPException(status_code=400, detail="Cart is empty")

    products = {p.id: p for p in await registry.fetch_products_by_shop(shop.id, published_only=True)}
    cart = []
    for item in payload.items:
        product = products.get(item.product_id)
        if not product:
            raise HTTPException(status_code=404, detail=f"Product not found: {item.product_id}")
        cart.append(CartLine(product=product, quantity=item.quantity, size=item.size))

    order = await registry.place_order(
        shop,
        cart,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        customer_address=payload.customer_address,
        customer_email=payload.customer_email,
        payment_method=payload.payment_method,
    )
    notification = await generate_admin_notification("NEW_ORDER", order, generator=generator)
    return {
        "order": order.model_dump(),
        "notification": notification.model_dump(),
        "whatsapp_url": whatsapp_link(notification.content.whatsapp),
    }


@app.patch("/api/orders/{order_id}/status")
async def update_order_status(order_id: str, payload: OrderStatusRequest, registry: RegistryService = Depends(get_registry)):
    order = await registry.update_order_status(order_id, payload.status)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order.model_dump()


@app.get("/api/admin/orders")
async def list_orders(shop_id: Optional[str] = None, registry: RegistryService = Depends(get_registry)):
    orders = await registry.fetch_orders_by_shop(shop_id) if shop_id else await registry.fetch_all_orders()
    return [o.model_dump() for o in orders]


@app.get("/api/admin/summary")
async def admin_summary(registry: RegistryService = Depends(get_registry)):
    orders = await registry.fetch_all_orders()
    summary = summarize_orders(orders)
    summary["shop_count"] = len(await registry.fetch_all_shops())
    return summary


@app.get("/")
def read_root():
    return {"message": "PK-Mart Marketplace API running"}


@app.get("/test")
async def test_database(registry: RegistryService = Depends(get_registry)):
    response = {
        "backend": "✅ Running",
        "storage": "❌ Not Available",
        "storage_backend": type(registry.store.backend).__name__,
        "storage_key": registry.store.key,
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "collections": {},
    }
    try:
        data = registry.store.load()
        response["storage"] = "✅ Connected & Working"
        response["collections"] = {
            "shops": len(data.shops),
            "products": len(data.products),
            "orders": len(data.orders),
        }
    except StorageError as e:
        response["storage"] = f"⚠️  Error: {str(e)[:50]}"
    if db is not None:
        response["database_name"] = db.name
    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
