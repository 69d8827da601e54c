from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pos_app.database import get_db
from pos_app.schemas.category import CategoryIn, CategoryOut
from pos_app.schemas.product import CreateResult, SaveResult
from pos_app.services import category_service

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return category_service.list_categories(db)


@router.post("", response_model=CreateResult)
def create_category(data: CategoryIn, db: Session = Depends(get_db)):
    category = category_service.create_category(db, data)
    return {"id": category.id, "updated_at": category.updated_at}


@router.put("/{category_id}", response_model=SaveResult)
def update_category(category_id: int, data: CategoryIn, db: Session = Depends(get_db)):
    category = category_service.update_category(db, category_id, data)
    return {"success": True, "updated_at": category.updated_at}


@router.delete("/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db)):
    category_service.delete_category(db, category_id)
    return {"success": True}
