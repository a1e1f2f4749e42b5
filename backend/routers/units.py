from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.units import Unit, UnitCreate, UnitUpdate
from utils.auth_utils import EDIT_INVENTORY, VIEW_INVENTORY, get_current_user, get_user_identifier, require_permission
from crud import units as crud_units

router = APIRouter(prefix="/units", tags=["Units"])
logger = logging.getLogger("units")

@router.get("/", response_model=List[Unit], dependencies=[Depends(require_permission(VIEW_INVENTORY))])
def read_units(db: Session = Depends(get_db)):
    return crud_units.get_units(db)

@router.post("/", response_model=Unit, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def create_unit(unit: UnitCreate, db: Session = Depends(get_db), user: dict = Depends(get_current_user)):
    db_unit = crud_units.create_unit(db, unit, user)
    logger.info(f"Unit '{db_unit.name}' created by user {get_user_identifier(user)}")
    return db_unit

@router.put("/{unit_id}", response_model=Unit, dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def update_unit(
    unit_id: int,
    unit: UnitUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    return crud_units.update_unit(db, unit_id, unit, user)

@router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def delete_unit(unit_id: int, db: Session = Depends(get_db), user: dict = Depends(get_current_user)):
    crud_units.delete_unit(db, unit_id)
    logger.info(f"Unit ID {unit_id} deleted by user {get_user_identifier(user)}")
    return None
