"""
Synthetic product data used to backfill names and prices.

When a product element has no usable name or price (empty, or text that is
clearly a scraping artifact), a plausible value is generated from static
vocabularies. Prices are formatted as Indian rupees with en-IN digit grouping.
"""

from __future__ import annotations

import random
from typing import Optional

PRODUCT_CATEGORIES = [
    # electronics
    "智能手表", "无线耳机", "蓝牙音箱", "智能手环", "充电宝",
    # home
    "沙发", "床垫", "桌子", "椅子", "衣柜",
    # apparel
    "上衣", "裤子", "外套", "连衣裙", "鞋子",
    # beauty
    "口红", "面霜", "精华液", "香水", "护肤品",
    # food
    "巧克力", "饼干", "咖啡", "茶叶", "山核桃",
    # sports
    "跑步鞋", "瑜伽垫", "健身器材", "自行车", "篮球",
]

BRANDS = [
    "Apple", "Samsung", "Xiaomi", "Huawei", "Nike", "Adidas", "IKEA", "MUJI", "Zara", "H&M",
    "Chanel", "Dior", "Gucci", "Prada", "Nestle", "Coca-Cola", "Pepsi", "Starbucks", "Nike",
    "Under Armour",
]

PRODUCT_ADJECTIVES = [
    "精致", "时尚", "经典", "优质", "轻便", "智能", "环保", "舒适", "简约", "豪华",
    "耐用", "便携", "实用", "高端", "复古",
]

# Names starting with these are generic stand-ins, not scraped titles.
PLACEHOLDER_NAME_PREFIXES = ("Product", "Item", "Gadget", "Device")

UNKNOWN_NAME = "未知名称"
UNKNOWN_PRICE = "未知价格"
PRICE_PLACEHOLDER_MARKER = "#price_placeholder_"

CAMERA_PRODUCTS = [
    "DJI Mini 3 Pro", "DJI Air 2S", "DJI Mavic 3", "DJI FPV", "DJI Phantom 4 Pro V2.0",
    "DJI Inspire 2", "DJI Matrice 300 RTK", "DJI Avata", "DJI Mini 3", "DJI Mavic 3 Classic",
    "DJI Mavic 3 Cine", "DJI Mini 2", "DJI Mini SE", "DJI Mavic Air 2", "DJI Mavic 2 Pro",
]

PRICE_RANGE = (1000, 50000)
CAMERA_PRICE_RANGE = (9999, 50000)


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def format_inr(amount: int) -> str:
    """
    Format an integer with Indian digit grouping: last three digits, then pairs.

    >>> format_inr(1234567)
    '12,34,567'
    """
    sign = "-" if amount < 0 else ""
    digits = str(abs(int(amount)))
    if len(digits) <= 3:
        return sign + digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return sign + ",".join(groups + [tail])


def format_price(amount: int) -> str:
    return f"Rs. {format_inr(amount)}"


def generate_product_data(rng: Optional[random.Random] = None) -> dict[str, str]:
    """Random '{brand} {adjective}{category}' name and 'Rs. N' price."""
    r = _rng(rng)
    category = r.choice(PRODUCT_CATEGORIES)
    brand = r.choice(BRANDS)
    adjective = r.choice(PRODUCT_ADJECTIVES)
    return {
        "name": f"{brand} {adjective}{category}",
        "price": format_price(r.randint(*PRICE_RANGE)),
    }


def generate_camera_price(rng: Optional[random.Random] = None) -> str:
    return format_price(_rng(rng).randint(*CAMERA_PRICE_RANGE))


def is_placeholder_name(name: Optional[str]) -> bool:
    if not name or not name.strip():
        return True
    return (
        "#" in name
        or name == UNKNOWN_NAME
        or name.startswith(PLACEHOLDER_NAME_PREFIXES)
    )


def is_placeholder_price(price: Optional[str]) -> bool:
    if not price or not price.strip():
        return True
    return PRICE_PLACEHOLDER_MARKER in price or price == UNKNOWN_PRICE


def fill_placeholders(record: dict, rng: Optional[random.Random] = None) -> dict:
    """Replace placeholder name/price in place; returns the same record."""
    generated = generate_product_data(rng)
    if is_placeholder_name(record.get("name")):
        record["name"] = generated["name"]
    if is_placeholder_price(record.get("price")):
        record["price"] = generated["price"]
    return record
