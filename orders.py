"""
Order totals and the platform commission split.

Everything here is pure: no storage, no logging. The total and commission are
computed once when an order is built and are never revised afterwards.
"""
import secrets
import string
from datetime import datetime, timezone
from typing import Dict, List, Optional

from schemas import CartLine, Commission, Order, OrderItem, Shop

ADMIN_SHARE = 0.95
SELLER_SHARE = 0.05

ORDER_ID_ALPHABET = string.ascii_uppercase + string.digits


def cart_total(cart: List[CartLine]) -> float:
    total = 0
    for line in cart:
        total += line.product.price * line.quantity
    return total


def split_commission(total: float) -> Commission:
    return Commission(admin_amount=total * ADMIN_SHARE, seller_amount=total * SELLER_SHARE)


def new_order_id() -> str:
    return "PK-" + "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(6))


def build_order(
    shop: Shop,
    cart: List[CartLine],
    customer_name: str,
    customer_phone: str,
    customer_address: str,
    customer_email: Optional[str] = None,
    payment_method: str = "cod",
    currency: str = "PKR",
) -> Order:
    total = cart_total(cart)
    items = [
        OrderItem(
            product_id=line.product.id,
            product_name=line.product.name,
            product_image_url=line.product.image_url,
            quantity=line.quantity,
            price=line.product.price,
            size=line.size,
        )
        for line in cart
    ]
    return Order(
        id=new_order_id(),
        shop_id=shop.id,
        shop_name=shop.name,
        customer_name=customer_name,
        customer_phone=customer_phone,
        customer_email=customer_email,
        customer_address=customer_address,
        items=items,
        total_amount=total,
        commission=split_commission(total),
        currency=currency,
        payment_method=payment_method,
        status="pending",
        created_at=datetime.now(timezone.utc).isoformat(),
    )


def summarize_orders(orders: List[Order]) -> Dict:
    """Admin dashboard figures: gross sales, seller commission, net revenue.

    Per-shop commission_owed only counts completed orders; pending or failed
    orders are not paid out yet.
    """
    total_sales = 0
    total_commission = 0
    pending_orders = 0
    per_shop: Dict[str, Dict] = {}
    for order in orders:
        commission = order.commission or split_commission(order.total_amount)
        total_sales += order.total_amount
        total_commission += commission.seller_amount
        if order.status == "pending":
            pending_orders += 1
        entry = per_shop.setdefault(order.shop_id, {
            "shop_id": order.shop_id,
            "shop_name": order.shop_name,
            "orders": 0,
            "sales": 0,
            "commission_owed": 0,
        })
        entry["orders"] += 1
        entry["sales"] += order.total_amount
        if order.status == "completed":
            entry["commission_owed"] += commission.seller_amount
    return {
        "order_count": len(orders),
        "pending_orders": pending_orders,
        "total_sales": total_sales,
        "total_commission": total_commission,
        "net_revenue": total_sales - total_commission,
        "shops": list(per_shop.values()),
    }
