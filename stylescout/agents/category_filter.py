"""Hard filters applied to fetched products before any ranking."""

import re

import structlog

from stylescout.state.models import Product, ProductType, SearchIntent

logger = structlog.get_logger()


def _patterns(*terms: str) -> list[re.Pattern]:
    return [re.compile(re.escape(t), re.I) for t in terms]


# product type -> (include, exclude). Exclude is absolute and checked first.
CATEGORY_RULES: dict[ProductType, tuple[list[re.Pattern], list[re.Pattern]]] = {
    ProductType.TOPWEAR: (
        _patterns("shirt", "t-shirt", "tee", "top", "blouse", "kurta", "tunic", "polo",
                  "sweater", "hoodie", "sweatshirt", "cardigan", "vest", "crop", "tank", "cami"),
        _patterns("shoe", "sandal", "heel", "sneaker", "loafer", "boot", "slipper", "bag",
                  "handbag", "wallet", "belt", "watch", "earring", "necklace", "bracelet", "ring",
                  "pant", "jeans", "trouser", "skirt", "shorts", "legging"),
    ),
    ProductType.BOTTOMWEAR: (
        _patterns("pant", "jeans", "trouser", "chino", "shorts", "skirt", "legging", "jogger",
                  "cargo", "palazzo", "culottes"),
        _patterns("shoe", "sandal", "heel", "sneaker", "bag", "handbag", "shirt", "top",
                  "blouse", "t-shirt", "watch", "earring"),
    ),
    ProductType.DRESSES: (
        _patterns("dress", "gown", "maxi", "midi", "mini dress", "bodycon", "a-line",
                  "wrap dress", "shift dress", "sundress"),
        _patterns("shoe", "sandal", "bag", "handbag", "shirt", "pant", "jeans", "watch", "earring"),
    ),
    ProductType.FOOTWEAR: (
        _patterns("shoe", "sandal", "heel", "sneaker", "loafer", "boot", "slipper", "flat",
                  "wedge", "mule", "oxford", "pump", "stiletto"),
        _patterns("shirt", "pant", "dress", "bag", "watch", "skirt"),
    ),
    ProductType.ACCESSORIES: (
        _patterns("bag", "handbag", "clutch", "wallet", "belt", "watch", "earring", "necklace",
                  "bracelet", "ring", "scarf", "hat", "cap", "sunglasses"),
        _patterns("shirt", "pant", "dress", "shoe", "jeans", "top"),
    ),
    ProductType.ETHNIC: (
        _patterns("saree", "sari", "lehenga", "kurta", "kurti", "salwar", "churidar", "anarkali",
                  "sharara", "palazzo", "dupatta", "ghagra"),
        _patterns("shoe", "sandal", "bag", "watch", "jeans", "t-shirt"),
    ),
}


def _product_text(product: Product) -> str:
    return f"{product.title} {product.brand}".lower()


def hard_filter_by_category(products: list[Product], intent: SearchIntent) -> list[Product]:
    """Keep only products that positively belong to the intent's product type.

    A product is dropped when it matches any exclude pattern, kept when it
    matches an include pattern, and dropped when it matches neither.

    Args:
        products: Candidate products
        intent: Interpreted search intent

    Returns:
        Filtered products in their original order. The input list is
        returned unchanged when the intent has no product type.
    """
    if intent.product_type is None:
        return products

    rules = CATEGORY_RULES.get(ProductType(intent.product_type))
    if rules is None:
        return products
    include, exclude = rules

    filtered = []
    for product in products:
        text = _product_text(product)
        if any(p.search(text) for p in exclude):
            continue
        if any(p.search(text) for p in include):
            filtered.append(product)

    logger.debug(
        "Hard category filter applied",
        product_type=ProductType(intent.product_type).value,
        before=len(products),
        after=len(filtered),
    )
    return filtered


def filter_negative_keywords(products: list[Product], intent: SearchIntent) -> list[Product]:
    """Drop products whose title or brand contains any negative keyword."""
    if not intent.negative_keywords:
        return products

    negatives = [k.lower() for k in intent.negative_keywords if k]
    filtered = [p for p in products if not any(n in _product_text(p) for n in negatives)]

    if len(filtered) < len(products):
        logger.debug("Negative keyword filter applied", before=len(products), after=len(filtered))
    return filtered


def filter_by_price_range(products: list[Product], intent: SearchIntent) -> list[Product]:
    """Keep products inside the intent's price bounds (inclusive).

    Products without a readable (non-zero) price are kept.
    """
    price_range = intent.price_range
    if price_range is None or (price_range.min is None and price_range.max is None):
        return products

    filtered = []
    for product in products:
        price = product.price_value
        # "0" is what extraction yields for a missing price
        if price:
            if price_range.min is not None and price < price_range.min:
                continue
            if price_range.max is not None and price > price_range.max:
                continue
        filtered.append(product)

    logger.debug(
        "Price filter applied",
        min=price_range.min,
        max=price_range.max,
        before=len(products),
        after=len(filtered),
    )
    return filtered
