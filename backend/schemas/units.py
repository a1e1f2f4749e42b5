from typing import Optional
from datetime import datetime
from schemas.base import ApiModel

class UnitCreate(ApiModel):
    name: Optional[str] = None

class UnitUpdate(ApiModel):
    name: Optional[str] = None

class Unit(ApiModel):
    id: int
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
