from sqlalchemy.orm import Session

from pos_app.exceptions import NotFoundError
from pos_app.models.product import Product, ProductVariant
from pos_app.models.stock_history import StockHistory


def append_entry(
    db: Session,
    product_id: int,
    variant_id: int | None,
    change_amount: int,
    new_stock: int,
    reason: str,
) -> StockHistory:
    """Record a stock change computed by the caller.

    Added to the caller's session without committing so it lands in the same
    transaction as the stock write it describes.
    """
    entry = StockHistory(
        product_id=product_id,
        variant_id=variant_id,
        change_amount=change_amount,
        new_stock=new_stock,
        reason=reason,
    )
    db.add(entry)
    return entry


def get_history(db: Session, product_id: int) -> list[dict]:
    if db.query(Product.id).filter(Product.id == product_id).first() is None:
        raise NotFoundError("Product not found")

    rows = (
        db.query(StockHistory, ProductVariant.name)
        .outerjoin(ProductVariant, ProductVariant.id == StockHistory.variant_id)
        .filter(StockHistory.product_id == product_id)
        .order_by(StockHistory.timestamp.desc(), StockHistory.id.desc())
        .all()
    )
    return [
        {
            "id": entry.id,
            "product_id": entry.product_id,
            "variant_id": entry.variant_id,
            "variant_name": variant_name,
            "change_amount": entry.change_amount,
            "new_stock": entry.new_stock,
            "reason": entry.reason,
            "timestamp": entry.timestamp,
        }
        for entry, variant_name in rows
    ]
