from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from product_importer.models.product import Product

PRICE_QUANTUM = Decimal("0.01")

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"


def normalize_price(value) -> Decimal:
    """Two decimal places, half-up, the way prices are stored."""
    return Decimal(str(value)).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


# --------------------------
# FIND BY EXTERNAL ID
# --------------------------
def find_by_external_id(db: Session, external_id: str) -> Optional[Product]:
    return db.query(Product).filter(Product.external_id == external_id).first()

# --------------------------
# LIST PRODUCTS
# --------------------------
def list_products(db: Session) -> List[Product]:
    return db.query(Product).order_by(Product.external_id).all()

# --------------------------
# CREATE OR UPDATE (UPSERT)
# --------------------------
def create_or_update(
    db: Session,
    external_id: str,
    name: str,
    price: Decimal,
) -> Tuple[Product, str]:
    """
    Upsert one product keyed by external_id. Does not commit.

    Returns the product and one of CREATED / UPDATED / UNCHANGED; a row
    counts as UPDATED only when name or price actually changed.
    """
    price = normalize_price(price)
    product = find_by_external_id(db, external_id)

    if product is None:
        product = Product(external_id=external_id, name=name, active_price=price)
        db.add(product)
        db.flush()
        return product, CREATED

    changed = False
    if product.name != name:
        product.name = name
        changed = True
    if normalize_price(product.active_price) != price:
        product.active_price = price
        changed = True

    if changed:
        db.flush()
        return product, UPDATED
    return product, UNCHANGED
