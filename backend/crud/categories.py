from sqlalchemy.orm import Session
from models.categories import Category
from models.inventory_items import InventoryItem
from schemas.categories import CategoryCreate, CategoryUpdate
from utils.auth_utils import get_user_identifier
from database import transaction
from exceptions import InvalidStateError, NotFoundError
from utils import local_now

def get_category(db: Session, category_id: int):
    db_category = db.query(Category).filter(Category.id == category_id).first()
    if db_category is None:
        raise NotFoundError("Category not found.")
    return db_category

def get_categories(db: Session):
    return db.query(Category).order_by(Category.name).all()

def create_category(db: Session, category: CategoryCreate, user: dict):
    if db.query(Category).filter(Category.name == category.name).first():
        raise InvalidStateError(f"Category '{category.name}' already exists.", field="name")
    with transaction(db):
        db_category = Category(**category.model_dump(), created_by=get_user_identifier(user))
        db.add(db_category)
    db.refresh(db_category)
    return db_category

def update_category(db: Session, category_id: int, category: CategoryUpdate, user: dict):
    db_category = get_category(db, category_id)
    with transaction(db):
        for key, value in category.model_dump(exclude_unset=True).items():
            setattr(db_category, key, value)
        db_category.updated_at = local_now()
        db_category.updated_by = get_user_identifier(user)
    db.refresh(db_category)
    return db_category

def delete_category(db: Session, category_id: int):
    db_category = get_category(db, category_id)
    if db.query(InventoryItem).filter(InventoryItem.category_id == category_id).first():
        raise InvalidStateError("Cannot delete a category that still has inventory items.")
    with transaction(db):
        db.delete(db_category)
    return True
