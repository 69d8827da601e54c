from datetime import datetime, time, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from pos_app.models.product import Product
from pos_app.models.sale import Sale, SaleItem
from pos_app.time_utils import utcnow

RECENT_SALES_LIMIT = 5
REVENUE_TREND_DAYS = 7


def total_revenue(db: Session) -> float:
    return float(db.query(func.coalesce(func.sum(Sale.total_amount), 0.0)).scalar())


def sales_count(db: Session) -> int:
    return db.query(func.count(Sale.id)).scalar()


def low_stock_count(db: Session, threshold: int) -> int:
    # Counts the product's own stock column only; variant stock is not aggregated
    return db.query(func.count(Product.id)).filter(Product.stock < threshold).scalar()


def recent_sales(db: Session, limit: int = RECENT_SALES_LIMIT) -> list[dict]:
    results = (
        db.query(Sale, func.count(SaleItem.id).label("item_count"))
        .outerjoin(SaleItem, SaleItem.sale_id == Sale.id)
        .group_by(Sale.id)
        .order_by(Sale.timestamp.desc(), Sale.id.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": sale.id,
            "total_amount": sale.total_amount,
            "timestamp": sale.timestamp.isoformat(),
            "item_count": int(item_count),
        }
        for sale, item_count in results
    ]


def daily_revenue(db: Session, now: datetime | None = None, days: int = REVENUE_TREND_DAYS) -> list[dict]:
    """Revenue per UTC calendar day since midnight ``days`` days ago, oldest first.

    Days without sales are left out.
    """
    now = now or utcnow()
    since = datetime.combine(now.date() - timedelta(days=days), time.min)
    day = func.date(Sale.timestamp)

    results = (
        db.query(day.label("date"), func.sum(Sale.total_amount).label("revenue"))
        .filter(Sale.timestamp >= since)
        .group_by(day)
        .order_by(day)
        .all()
    )
    return [{"date": str(r.date), "revenue": round(float(r.revenue), 2)} for r in results]


def get_stats(db: Session, threshold: int) -> dict:
    return {
        "revenue": round(total_revenue(db), 2),
        "salesCount": sales_count(db),
        "lowStockCount": low_stock_count(db, threshold),
        "recentSales": recent_sales(db),
        "dailyRevenue": daily_revenue(db),
    }
