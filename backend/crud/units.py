from typing import Optional

from sqlalchemy.orm import Session
from models.units import Unit
from schemas.units import UnitCreate, UnitUpdate
from utils.auth_utils import get_user_identifier
from database import transaction
from exceptions import InvalidStateError, MissingFieldsError, NotFoundError
from utils import local_now

def get_unit(db: Session, unit_id: int):
    db_unit = db.query(Unit).filter(Unit.id == unit_id).first()
    if db_unit is None:
        raise NotFoundError("Unit not found.")
    return db_unit

def get_units(db: Session):
    return db.query(Unit).order_by(Unit.name).all()

def _clean_name(name: Optional[str]) -> str:
    if not name or not name.strip():
        raise MissingFieldsError("name", "Unit name is required.")
    return name.strip()

def _ensure_unique_name(db: Session, name: str, unit_id: Optional[int] = None):
    query = db.query(Unit).filter(Unit.name == name)
    if unit_id is not None:
        query = query.filter(Unit.id != unit_id)
    if query.first():
        raise InvalidStateError("Unit already exists.", field="name")

def create_unit(db: Session, unit: UnitCreate, user: dict):
    name = _clean_name(unit.name)
    _ensure_unique_name(db, name)
    with transaction(db):
        db_unit = Unit(name=name, created_by=get_user_identifier(user))
        db.add(db_unit)
    db.refresh(db_unit)
    return db_unit

def update_unit(db: Session, unit_id: int, unit: UnitUpdate, user: dict):
    db_unit = get_unit(db, unit_id)
    name = _clean_name(unit.name)
    _ensure_unique_name(db, name, unit_id)
    with transaction(db):
        db_unit.name = name
        db_unit.updated_at = local_now()
        db_unit.updated_by = get_user_identifier(user)
    db.refresh(db_unit)
    return db_unit

def delete_unit(db: Session, unit_id: int):
    db_unit = get_unit(db, unit_id)
    with transaction(db):
        db.delete(db_unit)
    return True
