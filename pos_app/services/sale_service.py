import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pos_app.exceptions import CheckoutError
from pos_app.models.product import Product, ProductVariant
from pos_app.models.sale import Sale, SaleItem
from pos_app.schemas.sale import CartLine, CheckoutRequest
from pos_app.services import ledger_service

logger = logging.getLogger(__name__)


def _decrement_stock(db: Session, line: CartLine) -> int:
    """Take ``line.quantity`` off the variant or product and return the new stock.

    The subtraction runs in the database so concurrent checkouts never lose a
    decrement. There is no floor: stock may go negative.
    """
    if line.selected_variant_id is not None:
        updated = (
            db.query(ProductVariant)
            .filter(ProductVariant.id == line.selected_variant_id, ProductVariant.product_id == line.id)
            .update({ProductVariant.stock: ProductVariant.stock - line.quantity}, synchronize_session=False)
        )
        if not updated:
            raise CheckoutError(f"Variant {line.selected_variant_id} not found for product {line.id}")
        return db.query(ProductVariant.stock).filter(ProductVariant.id == line.selected_variant_id).scalar()

    updated = (
        db.query(Product)
        .filter(Product.id == line.id)
        .update({Product.stock: Product.stock - line.quantity}, synchronize_session=False)
    )
    if not updated:
        raise CheckoutError(f"Product {line.id} not found")
    return db.query(Product.stock).filter(Product.id == line.id).scalar()


def checkout(db: Session, data: CheckoutRequest) -> Sale:
    """Persist a sale with its items, stock decrements and ledger rows in one transaction.

    Any failure rolls back everything: no sale, no items, no stock change and
    no history row survives a failed checkout.
    """
    try:
        sale = Sale(total_amount=data.total)
        db.add(sale)
        db.flush()

        for line in data.items:
            db.add(
                SaleItem(
                    sale_id=sale.id,
                    product_id=line.id,
                    variant_id=line.selected_variant_id,
                    quantity=line.quantity,
                    price_at_sale=line.price,
                )
            )
            new_stock = _decrement_stock(db, line)
            ledger_service.append_entry(
                db, line.id, line.selected_variant_id, -line.quantity, new_stock, f"Sale #{sale.id}"
            )
            if new_stock < 0:
                logger.warning(
                    "Stock for product %s variant %s went negative (%d) in sale #%s",
                    line.id, line.selected_variant_id, new_stock, sale.id,
                )

        db.commit()
    except CheckoutError as e:
        db.rollback()
        logger.error("Checkout rolled back: %s", e.reason)
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Checkout rolled back on storage error: %s", e)
        raise CheckoutError(str(e)) from e

    db.refresh(sale)
    logger.info("Sale #%s recorded: %d lines, total %.2f", sale.id, len(data.items), data.total)
    return sale


def get_sale(db: Session, sale_id: int) -> Sale | None:
    return db.query(Sale).filter(Sale.id == sale_id).first()
