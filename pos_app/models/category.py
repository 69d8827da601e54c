from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_app.database import Base


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    # Unix seconds; optimistic-concurrency token
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)

    # passive_deletes: the database FK, not the ORM, guards products still linked
    products: Mapped[list["Product"]] = relationship(  # noqa: F821
        "Product", back_populates="category", passive_deletes="all"
    )
