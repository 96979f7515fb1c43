from typing import List, Optional
from sqlalchemy.orm import Session
from toggle_rbac.database import models
from toggle_rbac.repositories.interfaces import IProjectRepository
from toggle_rbac.repositories.sqlalchemy.storage_errors import storage_operation

class SqlalchemyProjectRepository(IProjectRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    @storage_operation
    def create(self, project_model: models.Project) -> models.Project:
        self.db.add(project_model)
        self.db.commit()
        self.db.refresh(project_model)
        return project_model

    @storage_operation
    def find_by_id(self, project_id: str) -> Optional[models.Project]:
        return self.db.query(models.Project).filter(models.Project.id == project_id).first()

    @storage_operation
    def exists(self, project_id: str) -> bool:
        return self.db.query(models.Project.id).filter(models.Project.id == project_id).first() is not None

    @storage_operation
    def list_all(self) -> List[models.Project]:
        return self.db.query(models.Project).order_by(models.Project.name.asc()).all()

    @storage_operation
    def update(self, project: models.Project, name: str, description: Optional[str]) -> models.Project:
        project.name = name
        project.description = description
        self.db.commit()
        self.db.refresh(project)
        return project

    @storage_operation
    def delete(self, project: models.Project) -> bool:
        if project:
            self.db.delete(project)
            self.db.commit()
            return True
        return False
