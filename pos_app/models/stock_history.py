from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_app.database import Base
from pos_app.time_utils import utcnow


class StockHistory(Base):
    """Append-only audit trail of every stock change."""

    __tablename__ = "stock_history"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Not a foreign key: variant rows are replaced on every product edit
    variant_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    change_amount: Mapped[int] = mapped_column(Integer, nullable=False)  # positive=in, negative=out
    new_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String, nullable=False)  # "Sale #12", "Manual Adjustment", ...
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    product: Mapped["Product"] = relationship("Product", back_populates="stock_history")  # noqa: F821
