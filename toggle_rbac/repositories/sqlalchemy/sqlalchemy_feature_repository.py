from typing import List, Optional
from sqlalchemy.orm import Session
from toggle_rbac.database import models
from toggle_rbac.repositories.interfaces import IFeatureToggleRepository
from toggle_rbac.repositories.sqlalchemy.storage_errors import storage_operation

class SqlalchemyFeatureToggleRepository(IFeatureToggleRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    @storage_operation
    def get_project_id(self, feature_name: str) -> Optional[str]:
        row = self.db.query(models.Feature.project).filter(models.Feature.name == feature_name).first()
        return row[0] if row else None

    @storage_operation
    def get_features_by(self, project: str, archived: bool = False) -> List[models.Feature]:
        return self.db.query(models.Feature).filter(
            models.Feature.project == project,
            models.Feature.archived == archived
        ).order_by(models.Feature.name.asc()).all()
