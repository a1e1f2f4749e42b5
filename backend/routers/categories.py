from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from database import get_db
from schemas.categories import Category, CategoryCreate, CategoryUpdate
from utils.auth_utils import EDIT_INVENTORY, VIEW_INVENTORY, get_current_user, require_permission
from crud import categories as crud_categories

router = APIRouter(prefix="/categories", tags=["Categories"])

@router.post("/", response_model=Category, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def create_category(category: CategoryCreate, db: Session = Depends(get_db), user: dict = Depends(get_current_user)):
    return crud_categories.create_category(db, category, user)

@router.get("/", response_model=List[Category], dependencies=[Depends(require_permission(VIEW_INVENTORY))])
def read_categories(db: Session = Depends(get_db)):
    return crud_categories.get_categories(db)

@router.get("/{category_id}", response_model=Category, dependencies=[Depends(require_permission(VIEW_INVENTORY))])
def read_category(category_id: int, db: Session = Depends(get_db)):
    return crud_categories.get_category(db, category_id)

@router.patch("/{category_id}", response_model=Category, dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def update_category(
    category_id: int,
    category: CategoryUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    return crud_categories.update_category(db, category_id, category, user)

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def delete_category(category_id: int, db: Session = Depends(get_db)):
    crud_categories.delete_category(db, category_id)
    return None
