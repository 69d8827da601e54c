from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_app.database import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    # Authoritative only when the product has no variants
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("categories.id"), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    # Unix seconds; optimistic-concurrency token
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)

    category: Mapped["Category"] = relationship("Category", back_populates="products")  # noqa: F821
    variants: Mapped[list["ProductVariant"]] = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductVariant.id",
    )
    stock_history: Mapped[list["StockHistory"]] = relationship(  # noqa: F821
        "StockHistory", back_populates="product", cascade="all, delete-orphan"
    )

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None

    @property
    def total_stock(self) -> int:
        if self.variants:
            return sum(v.stock for v in self.variants)
        return self.stock


class ProductVariant(Base):
    __tablename__ = "product_variants"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_adjustment: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    product: Mapped["Product"] = relationship("Product", back_populates="variants")

    @property
    def effective_price(self) -> float:
        return self.product.price + self.price_adjustment
