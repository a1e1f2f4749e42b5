from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.audit_log import AuditLog
from crud import audit_log as crud_audit_log
from utils.auth_utils import ADMIN_ROLE, require_role

router = APIRouter(prefix="/audit-logs", tags=["Audit Logs"])
logger = logging.getLogger(__name__)

@router.get("/", response_model=List[AuditLog], dependencies=[Depends(require_role(ADMIN_ROLE))])
def read_audit_logs(
    table_name: Optional[str] = Query(None, alias="tableName"),
    record_id: Optional[int] = Query(None, alias="recordId"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return crud_audit_log.get_audit_logs(db, table_name=table_name, record_id=record_id, skip=skip, limit=limit)
