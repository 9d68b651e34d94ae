"""
Sample dataset written to an empty store on first access.
"""
from schemas import Registry, Shop, Product, PayoutInfo

SEED_TIMESTAMP = "2025-01-01T00:00:00+00:00"

OFFICIAL_IMAGES = [
    "https://res.cloudinary.com/dzt2nrkjr/image/upload/v1770054612/16AMERICANFOOTBALLMODEL_swj02j.jpg",
    "https://res.cloudinary.com/dzt2nrkjr/image/upload/v1770048123/FD-163_FD-5060_u9c4nk.png",
    "https://res.cloudinary.com/dzt2nrkjr/image/upload/v1770048122/iw4bvdxfzz7ak15hcgrm_cqn51z.jpg",
    "https://res.cloudinary.com/dzt2nrkjr/image/upload/v1770054975/250px-Uniforme_local_ialcqx.jpg",
    "https://res.cloudinary.com/dzt2nrkjr/image/upload/v1770054977/new-index-bat-bags-grid-fall-2025-3_igkuhe.jpg",
    "https://res.cloudinary.com/dzt2nrkjr/image/upload/v1770054614/American-Football-700-9_vpggpv.jpg",
    "https://res.cloudinary.com/dzt2nrkjr/image/upload/v1770056364/jerseys_j0kxki.jpg",
    "https://res.cloudinary.com/dzt2nrkjr/image/upload/v1770056366/american-football-player-uniform-training-field_23-2150034543_w6cmwh.jpg",
]

PRODUCT_NAMES = [
    "Pro Elite Basketball Jersey",
    "Varsity League Full Set",
    "Championship Mesh Uniform",
    "All-Star Performance Gear",
    "Slam Dunk Series Kit",
    "Courtside Pro Apparel",
    "Legacy Sports Uniform",
    "Dynamic Team Jersey",
]

PRICES = [35, 36, 37, 38, 39, 40]

SAMPLE_SELLERS = [
    {
        "id": "S-OFFICIAL",
        "full_name": "PK-Mart Official",
        "email": "official@pkmart.pk",
        "phone_number": "923000000001",
        "shop_name": "PK Mart Official",
        "payout_method": "Bank Transfer",
        "account_number": "PK00MEZN0000000000000001",
    },
    {
        "id": "S-LAHORE",
        "full_name": "Lahore Sports House",
        "email": "sports.lahore@gmail.com",
        "phone_number": "923000000002",
        "shop_name": "Lahore Sports House",
        "payout_method": "JazzCash",
        "account_number": "03000000002",
    },
]


def seller_to_shop(seller: dict) -> Shop:
    return Shop(
        id=f"shop-{seller['id'].lower()}",
        owner_id=seller["id"],
        name=seller["shop_name"],
        slug=seller["shop_name"].lower().replace(" ", "-"),
        status="active",
        verified=True,
        whatsapp_number=seller["phone_number"],
        email=seller["email"],
        category="Sportswear",
        joined_at=SEED_TIMESTAMP,
        payout_info=PayoutInfo(
            method=seller["payout_method"],
            account_number=seller["account_number"],
            account_title=seller["full_name"],
        ),
    )


def build_seed_registry() -> Registry:
    shops = [seller_to_shop(s) for s in SAMPLE_SELLERS]
    products = []
    for i, url in enumerate(OFFICIAL_IMAGES):
        products.append(Product(
            id=f"PRD-{i}",
            shop_id=shops[i % len(shops)].id,
            name=PRODUCT_NAMES[i % len(PRODUCT_NAMES)],
            description="Premium sports-grade fabric with moisture-wicking technology.",
            price=PRICES[i % len(PRICES)],
            category="Basketball Uniforms",
            image_url=url,
            stock=50,
            sizes=["S", "M", "L", "XL"],
            published=True,
            created_at=SEED_TIMESTAMP,
        ))
    return Registry(shops=shops, products=products, orders=[])
