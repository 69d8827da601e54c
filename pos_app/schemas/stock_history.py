from datetime import datetime

from pydantic import BaseModel


class StockHistoryOut(BaseModel):
    id: int
    product_id: int
    variant_id: int | None = None
    variant_name: str | None = None
    change_amount: int
    new_stock: int
    reason: str
    timestamp: datetime
