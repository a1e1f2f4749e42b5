from sqlalchemy.orm import Session
from models.providers import Provider
from models.provider_orders import ProviderOrder
from schemas.providers import ProviderCreate, ProviderUpdate
from utils.auth_utils import get_user_identifier
from crud.audit_log import create_audit_log
from database import transaction
from exceptions import InvalidStateError, NotFoundError
from schemas.audit_log import AuditLogCreate
from utils import local_now, sqlalchemy_to_dict

def get_provider(db: Session, provider_id: int):
    db_provider = db.query(Provider).filter(Provider.id == provider_id).first()
    if db_provider is None:
        raise NotFoundError("Provider not found.")
    return db_provider

def get_providers(db: Session, skip: int = 0, limit: int = 100):
    return db.query(Provider).order_by(Provider.name).offset(skip).limit(limit).all()

def _ensure_unique_email(db: Session, email: str, provider_id: int = None):
    query = db.query(Provider).filter(Provider.email == email)
    if provider_id is not None:
        query = query.filter(Provider.id != provider_id)
    if query.first():
        raise InvalidStateError(f"A provider with email '{email}' already exists.", field="email")

def create_provider(db: Session, provider: ProviderCreate, user: dict):
    _ensure_unique_email(db, provider.email)
    with transaction(db):
        db_provider = Provider(**provider.model_dump(), created_by=get_user_identifier(user))
        db.add(db_provider)
        db.flush()
        create_audit_log(db, AuditLogCreate(
            table_name='providers',
            record_id=db_provider.id,
            changed_by=get_user_identifier(user),
            action='CREATE',
            new_values=sqlalchemy_to_dict(db_provider)
        ))
    db.refresh(db_provider)
    return db_provider

def update_provider(db: Session, provider_id: int, provider: ProviderUpdate, user: dict):
    db_provider = get_provider(db, provider_id)
    update_data = provider.model_dump(exclude_unset=True)
    if update_data.get("email"):
        _ensure_unique_email(db, update_data["email"], provider_id)
    with transaction(db):
        old_values = sqlalchemy_to_dict(db_provider)
        for key, value in update_data.items():
            setattr(db_provider, key, value)
        db_provider.updated_at = local_now()
        db_provider.updated_by = get_user_identifier(user)
        db.flush()
        create_audit_log(db, AuditLogCreate(
            table_name='providers',
            record_id=provider_id,
            changed_by=get_user_identifier(user),
            action='UPDATE',
            old_values=old_values,
            new_values=sqlalchemy_to_dict(db_provider)
        ))
    db.refresh(db_provider)
    return db_provider

def delete_provider(db: Session, provider_id: int, user: dict):
    db_provider = get_provider(db, provider_id)
    if db.query(ProviderOrder).filter(ProviderOrder.provider_id == provider_id).first():
        raise InvalidStateError("Cannot delete a provider that has provider orders.")
    with transaction(db):
        old_values = sqlalchemy_to_dict(db_provider)
        # Items stay in inventory, they just lose their restock source
        for item in db_provider.items:
            item.provider_id = None
        db.delete(db_provider)
        create_audit_log(db, AuditLogCreate(
            table_name='providers',
            record_id=provider_id,
            changed_by=get_user_identifier(user),
            action='DELETE',
            old_values=old_values,
            new_values=None
        ))
    return True
