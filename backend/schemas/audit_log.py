from datetime import datetime
from pydantic import BaseModel
from typing import Optional, Dict, Any

from schemas.base import ApiModel

class AuditLogCreate(BaseModel):
    table_name: str
    record_id: int
    changed_by: str
    action: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None

class AuditLog(ApiModel):
    id: int
    table_name: str
    record_id: int
    changed_at: Optional[datetime] = None
    changed_by: str
    action: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
