import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from pos_app.exceptions import ConflictError, NotFoundError, ValidationError
from pos_app.models.category import Category  # noqa: F401
from pos_app.models.product import Product, ProductVariant
from pos_app.schemas.product import ProductIn, ProductOut, VariantIn
from pos_app.services import ledger_service
from pos_app.services.concurrency import is_stale, resolve_write_ts

logger = logging.getLogger(__name__)

INITIAL_STOCK = "Initial Stock"
MANUAL_ADJUSTMENT = "Manual Adjustment"
PRODUCT_UPDATE = "Product Update"


def _snapshot(product: Product) -> dict:
    return ProductOut.model_validate(product).model_dump(mode="json")


def _check_stock_floor(data: ProductIn, current: Product | None = None) -> None:
    """Reject negative stock unless it is the value already stored.

    Checkout may oversell, so an edit that sends an oversold count back
    unchanged is accepted. Any new stock value must be zero or more.
    """
    kept_stock = current.stock if current else None
    if data.stock < 0 and data.stock != kept_stock:
        raise ValidationError("Stock must be zero or positive")

    kept_variants = {v.id: v.stock for v in current.variants} if current else {}
    for v_data in data.variants or []:
        if v_data.stock < 0 and kept_variants.get(v_data.id) != v_data.stock:
            raise ValidationError(f"Stock for variant '{v_data.name}' must be zero or positive")


def _add_variants(db: Session, product: Product, variants: list[VariantIn], reason: str, log_empty: bool) -> None:
    for v_data in variants:
        variant = ProductVariant(
            name=v_data.name,
            stock=v_data.stock,
            price_adjustment=v_data.price_adjustment,
        )
        product.variants.append(variant)
        db.flush()
        if v_data.stock or log_empty:
            ledger_service.append_entry(db, product.id, variant.id, v_data.stock, v_data.stock, reason)


def list_products(db: Session) -> list[Product]:
    return (
        db.query(Product)
        .options(selectinload(Product.variants), joinedload(Product.category))
        .order_by(Product.id)
        .all()
    )


def get_product(db: Session, product_id: int) -> Product | None:
    return db.query(Product).filter(Product.id == product_id).first()


def create_product(db: Session, data: ProductIn) -> Product:
    _check_stock_floor(data)
    product = Product(
        name=data.name,
        price=data.price,
        stock=data.stock,
        category_id=data.category_id,
        image_url=data.image_url,
        updated_at=resolve_write_ts(data.updated_at),
    )
    db.add(product)
    try:
        db.flush()
        if data.stock > 0:
            ledger_service.append_entry(db, product.id, None, data.stock, data.stock, INITIAL_STOCK)
        _add_variants(db, product, data.variants or [], INITIAL_STOCK, log_empty=False)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError(f"Category {data.category_id} does not exist")

    db.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


def update_product(db: Session, product_id: int, data: ProductIn) -> Product:
    """Apply a full product edit guarded by the ``updated_at`` token.

    The variant set is replaced wholesale: existing rows are deleted and the
    submitted ones inserted with new ids.
    """
    product = get_product(db, product_id)
    if not product:
        raise NotFoundError("Product not found")

    ts = resolve_write_ts(data.updated_at, product.updated_at)
    if is_stale(ts, product.updated_at):
        raise ConflictError(_snapshot(product))
    _check_stock_floor(data, product)
    previous_stock = product.stock

    try:
        # Compare-and-set so a writer that committed after our read also loses
        updated = (
            db.query(Product)
            .filter(Product.id == product_id, Product.updated_at <= ts)
            .update(
                {
                    Product.name: data.name,
                    Product.price: data.price,
                    Product.stock: data.stock,
                    Product.category_id: data.category_id,
                    Product.image_url: data.image_url,
                    Product.updated_at: ts,
                }
            )
        )
        if not updated:
            db.rollback()
            current = get_product(db, product_id)
            if not current:
                raise NotFoundError("Product not found")
            raise ConflictError(_snapshot(current))

        if data.stock != previous_stock:
            ledger_service.append_entry(
                db, product_id, None, data.stock - previous_stock, data.stock, MANUAL_ADJUSTMENT
            )
        product.variants.clear()
        db.flush()
        _add_variants(db, product, data.variants or [], PRODUCT_UPDATE, log_empty=True)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError(f"Category {data.category_id} does not exist")

    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int) -> None:
    product = get_product(db, product_id)
    if not product:
        raise NotFoundError("Product not found")
    db.delete(product)
    db.commit()
    logger.info("Deleted product %s", product_id)
