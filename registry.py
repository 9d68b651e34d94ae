"""
Registry Service

CRUD over the Record Store. The service keeps no state of its own: every
mutation is one load, an in-memory change, and one save of the full registry.
Methods are async so callers can await them like a remote database client;
nothing here actually suspends.
"""
import os
import re
import secrets
from datetime import datetime, timezone
from typing import List, Optional

import structlog

from database import RecordStore
from orders import build_order
from schemas import CartLine, Order, PayoutInfo, Product, Seller, Shop

logger = structlog.get_logger(__name__)

OTP_OVERRIDE_CODE = "000000"


def env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def slugify(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.lower().strip())
    return re.sub(r"[^a-z0-9-]", "", slug)


def generate_otp() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


def shop_to_seller(shop: Shop) -> Seller:
    return Seller(
        id=shop.owner_id,
        full_name=shop.name,
        email=shop.email,
        phone_number=shop.whatsapp_number,
        shop_id=shop.id,
        shop_slug=shop.slug,
        status=shop.status,
        joined_at=shop.joined_at,
        payout_info=shop.payout_info,
    )


class RegistryService:
    def __init__(self, store: RecordStore, allow_otp_override: Optional[bool] = None):
        self.store = store
        if allow_otp_override is None:
            allow_otp_override = env_flag("OTP_OVERRIDE_ENABLED")
        self.allow_otp_override = allow_otp_override

    # ---------------------- Shops ----------------------

    async def create_shop(
        self,
        name: str,
        email: str,
        whatsapp: str,
        category: str,
        payout_info: Optional[PayoutInfo] = None,
    ) -> Shop:
        registry = self.store.load()
        shop = Shop(
            id=secrets.token_hex(8),
            owner_id="s" + secrets.token_hex(8),
            name=name,
            slug=slugify(name),
            status="pending_verification",
            verified=False,
            otp_code=generate_otp(),
            whatsapp_number=whatsapp,
            email=email,
            category=category,
            joined_at=now_iso(),
            payout_info=payout_info,
        )
        registry.shops.append(shop)
        self.store.save(registry)
        logger.info("shop_created", shop_id=shop.id, slug=shop.slug)
        return shop

    async def verify_otp(self, shop_id: str, code: str) -> bool:
        registry = self.store.load()
        shop = next((s for s in registry.shops if s.id == shop_id), None)
        if shop is None or shop.status != "pending_verification":
            return False
        matches = shop.otp_code is not None and code == shop.otp_code
        if not matches and self.allow_otp_override and code == OTP_OVERRIDE_CODE:
            logger.warning("otp_override_used", shop_id=shop_id)
            matches = True
        if not matches:
            logger.info("otp_rejected", shop_id=shop_id)
            return False
        shop.status = "pending_admin_approval"
        shop.verified = True
        shop.otp_code = None
        self.store.save(registry)
        return True

    async def approve_shop(self, shop_id: str) -> Optional[Shop]:
        registry = self.store.load()
        shop = next((s for s in registry.shops if s.id == shop_id), None)
        if shop is None:
            return None
        if shop.status == "pending_admin_approval":
            shop.status = "active"
            self.store.save(registry)
            logger.info("shop_approved", shop_id=shop_id)
        return shop

    async def fetch_shop(self, shop_id: str) -> Optional[Shop]:
        return next((s for s in self.store.load().shops if s.id == shop_id), None)

    async def fetch_shop_by_slug(self, slug: str) -> Optional[Shop]:
        return next((s for s in self.store.load().shops if s.slug == slug), None)

    async def fetch_all_shops(self) -> List[Shop]:
        return self.store.load().shops

    async def fetch_all_sellers(self) -> List[Seller]:
        return [shop_to_seller(s) for s in self.store.load().shops]

    async def toggle_shop_status(self, seller_id: str) -> List[Seller]:
        registry = self.store.load()
        for shop in registry.shops:
            if shop.owner_id != seller_id:
                continue
            if shop.status == "active":
                shop.status = "suspended"
            elif shop.status == "suspended":
                shop.status = "active"
            logger.info("shop_status_toggled", seller_id=seller_id, status=shop.status)
        self.store.save(registry)
        return [shop_to_seller(s) for s in registry.shops]

    # ---------------------- Products ----------------------

    async def save_product(self, product: Product) -> None:
        registry = self.store.load()
        for i, existing in enumerate(registry.products):
            if existing.id == product.id:
                registry.products[i] = product
                break
        else:
            registry.products.append(product)
        self.store.save(registry)

    async def create_product(
        self,
        shop_id: str,
        name: str,
        price: float,
        description: str = "",
        category: str = "General",
        image_url: Optional[str] = None,
        stock: int = 0,
        sizes: Optional[List[str]] = None,
        published: bool = True,
    ) -> Product:
        product = Product(
            id="p" + secrets.token_hex(8),
            shop_id=shop_id,
            name=name,
            description=description,
            price=price,
            category=category,
            image_url=image_url,
            stock=stock,
            sizes=sizes or [],
            published=published,
            created_at=now_iso(),
        )
        await self.save_product(product)
        logger.info("product_created", product_id=product.id, shop_id=shop_id)
        return product

    async def fetch_products_by_shop(self, shop_id: str, published_only: bool = False) -> List[Product]:
        return [
            p for p in self.store.load().products
            if p.shop_id == shop_id and (p.published or not published_only)
        ]

    async def fetch_all_products(self) -> List[Product]:
        return self.store.load().products

    # ---------------------- Orders ----------------------

    async def save_order(self, order: Order) -> None:
        # Append-only: re-saving an existing id stores a second copy.
        registry = self.store.load()
        registry.orders.append(order)
        self.store.save(registry)

    async def place_order(
        self,
        shop: Shop,
        cart: List[CartLine],
        customer_name: str,
        customer_phone: str,
        customer_address: str,
        customer_email: Optional[str] = None,
        payment_method: str = "cod",
    ) -> Order:
        order = build_order(
            shop,
            cart,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_address=customer_address,
            customer_email=customer_email,
            payment_method=payment_method,
        )
        await self.save_order(order)
        logger.info("order_placed", order_id=order.id, shop_id=shop.id, total=order.total_amount)
        return order

    async def update_order_status(self, order_id: str, status: str) -> Optional[Order]:
        registry = self.store.load()
        order = next((o for o in registry.orders if o.id == order_id), None)
        if order is None:
            return None
        order.status = status
        self.store.save(registry)
        logger.info("order_status_updated", order_id=order_id, status=status)
        return order

    async def fetch_all_orders(self) -> List[Order]:
        return self.store.load().orders

    async def fetch_orders_by_shop(self, shop_id: str) -> List[Order]:
        return [o for o in self.store.load().orders if o.shop_id == shop_id]
