from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pos_app.database import get_db
from pos_app.schemas.product import CreateResult, ProductIn, ProductOut, SaveResult
from pos_app.schemas.stock_history import StockHistoryOut
from pos_app.services import ledger_service, product_service

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=list[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return product_service.list_products(db)


@router.post("", response_model=CreateResult)
def create_product(data: ProductIn, db: Session = Depends(get_db)):
    product = product_service.create_product(db, data)
    return {"id": product.id, "updated_at": product.updated_at}


@router.put("/{product_id}", response_model=SaveResult)
def update_product(product_id: int, data: ProductIn, db: Session = Depends(get_db)):
    product = product_service.update_product(db, product_id, data)
    return {"success": True, "updated_at": product.updated_at}


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    product_service.delete_product(db, product_id)
    return {"success": True}


@router.get("/{product_id}/history", response_model=list[StockHistoryOut])
def stock_history(product_id: int, db: Session = Depends(get_db)):
    return ledger_service.get_history(db, product_id)
