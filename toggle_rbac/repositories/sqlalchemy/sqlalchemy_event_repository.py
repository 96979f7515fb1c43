from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from toggle_rbac.database import models
from toggle_rbac.repositories.interfaces import IEventRepository
from toggle_rbac.repositories.sqlalchemy.storage_errors import storage_operation

class SqlalchemyEventRepository(IEventRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    @storage_operation
    def store(self, event_type: str, created_by: Optional[str], data: Dict[str, Any]) -> models.Event:
        event = models.Event(type=event_type, created_by=created_by, data=data)
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        return event
