from decimal import Decimal, InvalidOperation
import logging

from sqlalchemy.orm import Session
from models.app_config import AppConfig
from schemas.app_config import AppConfigCreate, AppConfigUpdate

# Audit imports
from crud.audit_log import create_audit_log
from database import transaction
from exceptions import InvalidStateError, NotFoundError
from schemas.audit_log import AuditLogCreate
from utils import local_now, sqlalchemy_to_dict

logger = logging.getLogger("app_config")


def _audit(db: Session, db_config: AppConfig, user_id: str, action: str, old_values):
    create_audit_log(db, AuditLogCreate(
        table_name='app_config',
        record_id=db_config.id,
        changed_by=user_id,
        action=action,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_config),
    ))


# Create a new config entry
def create_config(db: Session, config: AppConfigCreate, user_id: str):
    if db.query(AppConfig).filter(AppConfig.name == config.name).first():
        raise InvalidStateError(f"Configuration '{config.name}' already exists.", field="name")
    with transaction(db):
        db_config = AppConfig(name=config.name, value=config.value, created_by=user_id)
        db.add(db_config)
        db.flush()
        _audit(db, db_config, user_id, 'CREATE', {})
    db.refresh(db_config)
    return db_config


# Get config by name (or all configs)
def get_config(db: Session, name: str = None):
    if name:
        return db.query(AppConfig).filter(AppConfig.name == name).first()
    return db.query(AppConfig).order_by(AppConfig.name).all()


def get_decimal_setting(db: Session, name: str, default: Decimal) -> Decimal:
    """A numeric AppConfig value, or ``default`` when absent or unparsable."""
    db_config = get_config(db, name)
    if db_config is None:
        return default
    try:
        return Decimal(db_config.value)
    except InvalidOperation:
        logger.warning(f"Ignoring non-numeric configuration {name}={db_config.value!r}; using {default}")
        return default


# Update config by name
def update_config_by_name(db: Session, name: str, config: AppConfigUpdate, user_id: str):
    db_config = get_config(db, name)
    if not db_config:
        raise NotFoundError(f"Configuration '{name}' not found.")

    with transaction(db):
        old_values = sqlalchemy_to_dict(db_config)
        for field, value in config.model_dump(exclude_unset=True).items():
            setattr(db_config, field, value)
        db_config.updated_at = local_now()
        db_config.updated_by = user_id
        _audit(db, db_config, user_id, 'UPDATE', old_values)
    db.refresh(db_config)
    return db_config
