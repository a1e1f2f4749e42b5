from typing import List, Optional

from sqlalchemy.orm import Session
from models.audit_log import AuditLog
from schemas.audit_log import AuditLogCreate

def create_audit_log(db: Session, log_entry: AuditLogCreate):
    # Flushed only: the entry commits or rolls back with the change it records
    db_log_entry = AuditLog(**log_entry.model_dump())
    db.add(db_log_entry)
    db.flush()
    return db_log_entry

def get_audit_logs(
    db: Session,
    table_name: Optional[str] = None,
    record_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[AuditLog]:
    """Newest entries first, optionally narrowed to one table or one record."""
    query = db.query(AuditLog)
    if table_name:
        query = query.filter(AuditLog.table_name == table_name)
    if record_id is not None:
        query = query.filter(AuditLog.record_id == record_id)
    return query.order_by(AuditLog.id.desc()).offset(skip).limit(limit).all()
