from pydantic import EmailStr
from typing import Optional
from datetime import datetime
from schemas.base import ApiModel

class ProviderBase(ApiModel):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    iban: Optional[str] = None

class ProviderCreate(ProviderBase):
    pass

class ProviderUpdate(ApiModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    iban: Optional[str] = None

class ProviderBrief(ApiModel):
    id: int
    name: str
    email: Optional[str] = None

class Provider(ProviderBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
