import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos_app.exceptions import ConflictError, NotFoundError, ReferentialIntegrityError, ValidationError
from pos_app.models.category import Category
from pos_app.models.product import Product
from pos_app.schemas.category import CategoryIn
from pos_app.services.concurrency import is_stale, resolve_write_ts

logger = logging.getLogger(__name__)


def _snapshot(category: Category) -> dict:
    return {"id": category.id, "name": category.name, "updated_at": category.updated_at}


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.id).all()


def get_category(db: Session, category_id: int) -> Category | None:
    return db.query(Category).filter(Category.id == category_id).first()


def create_category(db: Session, data: CategoryIn) -> Category:
    category = Category(name=data.name, updated_at=resolve_write_ts(data.updated_at))
    db.add(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError(f"Category '{data.name}' already exists")
    db.refresh(category)
    return category


def update_category(db: Session, category_id: int, data: CategoryIn) -> Category:
    category = get_category(db, category_id)
    if not category:
        raise NotFoundError("Category not found")

    ts = resolve_write_ts(data.updated_at, category.updated_at)
    if is_stale(ts, category.updated_at):
        raise ConflictError(_snapshot(category))

    try:
        # Compare-and-set so a writer that committed after our read also loses
        updated = (
            db.query(Category)
            .filter(Category.id == category_id, Category.updated_at <= ts)
            .update({Category.name: data.name, Category.updated_at: ts}, synchronize_session=False)
        )
        if not updated:
            db.rollback()
            current = get_category(db, category_id)
            if not current:
                raise NotFoundError("Category not found")
            raise ConflictError(_snapshot(current))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError(f"Category '{data.name}' already exists")

    db.refresh(category)
    return category


def delete_category(db: Session, category_id: int) -> None:
    category = get_category(db, category_id)
    if not category:
        raise NotFoundError("Category not found")

    in_use = db.query(Product.id).filter(Product.category_id == category_id).count()
    if in_use:
        raise ReferentialIntegrityError("Cannot delete category while products are linked to it.")

    db.delete(category)
    try:
        db.commit()
    except IntegrityError:
        # A product was linked after the check above
        db.rollback()
        raise ReferentialIntegrityError("Cannot delete category while products are linked to it.")
    logger.info("Deleted category %s", category_id)
