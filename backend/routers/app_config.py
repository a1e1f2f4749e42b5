from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.app_config import AppConfigCreate, AppConfigUpdate, AppConfigOut
from crud import app_config as crud_app_config
from utils.auth_utils import ADMIN_ROLE, get_current_user, get_user_identifier, require_role

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/configurations/", response_model=AppConfigOut, status_code=status.HTTP_201_CREATED)
def create_config(config: AppConfigCreate, db: Session = Depends(get_db), user: dict = Depends(require_role(ADMIN_ROLE))):
    db_config = crud_app_config.create_config(db, config, user_id=get_user_identifier(user))
    logger.info(f"Configuration '{config.name}' created by user {get_user_identifier(user)}")
    return db_config


@router.get("/configurations/", response_model=List[AppConfigOut], dependencies=[Depends(get_current_user)])
def get_configs(name: Optional[str] = None, db: Session = Depends(get_db)):
    configs = crud_app_config.get_config(db, name=name)
    # Always return a list, even if empty
    if name:
        return [configs] if configs else []
    return configs


@router.patch("/configurations/{name}/", response_model=AppConfigOut)
def update_config(name: str, config: AppConfigUpdate, db: Session = Depends(get_db), user: dict = Depends(require_role(ADMIN_ROLE))):
    updated = crud_app_config.update_config_by_name(db, name, config, user_id=get_user_identifier(user))
    logger.info(f"Configuration '{name}' updated by user {get_user_identifier(user)}")
    return updated
