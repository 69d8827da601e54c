from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pos_app.database import get_db
from pos_app.schemas.sale import CheckoutRequest, CheckoutResult
from pos_app.services import sale_service

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResult)
def checkout(data: CheckoutRequest, db: Session = Depends(get_db)):
    sale = sale_service.checkout(db, data)
    return {"success": True, "saleId": sale.id}
