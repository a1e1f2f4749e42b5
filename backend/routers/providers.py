from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.providers import Provider, ProviderCreate, ProviderUpdate
from utils.auth_utils import EDIT_PROVIDERS, VIEW_PROVIDERS, get_current_user, get_user_identifier, require_permission
from crud import providers as crud_providers

router = APIRouter(prefix="/providers", tags=["Providers"])
logger = logging.getLogger("providers")

@router.post("/", response_model=Provider, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(EDIT_PROVIDERS))])
def create_provider(provider: ProviderCreate, db: Session = Depends(get_db), user: dict = Depends(get_current_user)):
    db_provider = crud_providers.create_provider(db, provider, user)
    logger.info(f"Provider '{db_provider.name}' (ID: {db_provider.id}) created by user {get_user_identifier(user)}")
    return db_provider

@router.get("/", response_model=List[Provider], dependencies=[Depends(require_permission(VIEW_PROVIDERS))])
def read_providers(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return crud_providers.get_providers(db, skip=skip, limit=limit)

@router.get("/{provider_id}", response_model=Provider, dependencies=[Depends(require_permission(VIEW_PROVIDERS))])
def read_provider(provider_id: int, db: Session = Depends(get_db)):
    return crud_providers.get_provider(db, provider_id)

@router.patch("/{provider_id}", response_model=Provider, dependencies=[Depends(require_permission(EDIT_PROVIDERS))])
def update_provider(
    provider_id: int,
    provider: ProviderUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    db_provider = crud_providers.update_provider(db, provider_id, provider, user)
    logger.info(f"Provider ID {provider_id} updated by user {get_user_identifier(user)}")
    return db_provider

@router.delete("/{provider_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(EDIT_PROVIDERS))])
def delete_provider(provider_id: int, db: Session = Depends(get_db), user: dict = Depends(get_current_user)):
    """Delete a provider. Providers with provider orders are kept for history."""
    crud_providers.delete_provider(db, provider_id, user)
    logger.info(f"Provider ID {provider_id} deleted by user {get_user_identifier(user)}")
    return None
