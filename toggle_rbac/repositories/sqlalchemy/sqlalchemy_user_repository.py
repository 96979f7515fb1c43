from typing import List
from sqlalchemy.orm import Session
from toggle_rbac.database import models
from toggle_rbac.repositories.interfaces import IUserRepository
from toggle_rbac.repositories.sqlalchemy.storage_errors import storage_operation

class SqlalchemyUserRepository(IUserRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    @storage_operation
    def get_all_with_id(self, user_ids: List[int]) -> List[models.User]:
        if not user_ids:
            return []
        return self.db.query(models.User).filter(models.User.id.in_(user_ids)).order_by(models.User.id.asc()).all()
