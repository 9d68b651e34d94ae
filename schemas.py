"""
Database Schemas for the PK-Mart multi-vendor marketplace

Every model here is stored inside a single registry blob (see database.py).
Shop is the source of truth for seller identity; Seller is a read-only view
derived from it and never persisted.
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Literal

ShopStatus = Literal["pending_verification", "pending_admin_approval", "active", "suspended"]
NotificationType = Literal["NEW_SELLER", "NEW_ORDER"]


class PayoutInfo(BaseModel):
    method: str = Field(..., description="JazzCash, Easypaisa or Bank Transfer")
    account_number: str = Field(..., description="Wallet or IBAN number")
    account_title: str = Field("", description="Name on the payout account")


class Shop(BaseModel):
    id: str
    owner_id: str = Field(..., description="Owner reference, doubles as the Seller id")
    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="Derived once from name, used in links")
    status: ShopStatus = "pending_verification"
    verified: bool = False
    otp_code: Optional[str] = Field(None, description="6 digit code, cleared after verification")
    whatsapp_number: str = Field("", description="WhatsApp number for notifications")
    email: str = ""
    category: str = "General"
    joined_at: str = Field(..., description="ISO-8601 creation timestamp")
    payout_info: Optional[PayoutInfo] = None


class Seller(BaseModel):
    id: str
    full_name: str
    email: str
    phone_number: str
    shop_id: str
    shop_slug: str
    status: ShopStatus
    joined_at: str
    payout_info: Optional[PayoutInfo] = None


class Product(BaseModel):
    id: str
    shop_id: str = Field(..., description="Owning shop id")
    name: str = Field(..., description="Product name")
    description: str = ""
    price: float = Field(..., description="Unit price in the shop currency")
    category: str = "General"
    image_url: Optional[str] = Field(None, description="Primary product image URL")
    stock: int = 0
    sizes: List[str] = Field(default_factory=list, description="e.g. S, M, L")
    published: bool = True
    created_at: str


class OrderItem(BaseModel):
    product_id: str
    product_name: str
    product_image_url: Optional[str] = None
    quantity: int = Field(..., ge=1)
    price: float = Field(..., description="Unit price at purchase time")
    size: Optional[str] = None


class CartLine(BaseModel):
    product: Product
    quantity: int = Field(1, ge=1)
    size: Optional[str] = None


class Commission(BaseModel):
    admin_amount: float
    seller_amount: float


class Order(BaseModel):
    id: str
    shop_id: str
    shop_name: Optional[str] = None
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    customer_address: str
    items: List[OrderItem]
    total_amount: float = Field(..., description="Frozen at creation time")
    commission: Optional[Commission] = None
    currency: str = "PKR"
    payment_method: str = Field("cod", description="cod, bank_transfer")
    status: str = Field("pending", description="pending, completed, failed, cancelled")
    created_at: str


class NotificationContent(BaseModel):
    whatsapp: str
    email: str


class AdminNotification(BaseModel):
    id: str
    type: NotificationType
    timestamp: str
    content: NotificationContent
    sent: bool


class Registry(BaseModel):
    shops: List[Shop] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    orders: List[Order] = Field(default_factory=list)
    # Legacy layout only; sellers are always derived from shops.
    sellers: List[dict] = Field(default_factory=list)
