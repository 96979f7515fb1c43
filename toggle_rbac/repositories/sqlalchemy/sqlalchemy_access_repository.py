from typing import List, Optional, Dict, Any
from sqlalchemy import or_
from sqlalchemy.orm import Session
from toggle_rbac.database import models
from toggle_rbac.repositories.interfaces import IAccessRepository
from toggle_rbac.repositories.sqlalchemy.storage_errors import storage_operation
from toggle_rbac.services.exceptions import RoleNotFoundError

class SqlalchemyAccessRepository(IAccessRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    @storage_operation
    def get_permissions_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        rows = self.db.query(models.RolePermission.project, models.RolePermission.permission).join(
            models.RoleUser, models.RoleUser.role_id == models.RolePermission.role_id
        ).filter(models.RoleUser.user_id == user_id).all()
        return [{"project": row.project, "permission": row.permission} for row in rows]

    @storage_operation
    def get_permissions_for_role(self, role_id: int) -> List[Dict[str, Any]]:
        rows = self.db.query(models.RolePermission.project, models.RolePermission.permission).filter(
            models.RolePermission.role_id == role_id
        ).all()
        return [{"project": row.project, "permission": row.permission} for row in rows]

    @storage_operation
    def get_roles(self) -> List[models.Role]:
        return self.db.query(models.Role).order_by(models.Role.id.asc()).all()

    @storage_operation
    def get_role_with_id(self, role_id: int) -> models.Role:
        role = self.db.query(models.Role).filter(models.Role.id == role_id).first()
        if not role:
            raise RoleNotFoundError(f"Role with id '{role_id}' not found.")
        return role

    @storage_operation
    def get_roles_for_project(self, project: str) -> List[models.Role]:
        return self.db.query(models.Role).filter(models.Role.project == project).order_by(models.Role.id.asc()).all()

    @storage_operation
    def remove_roles_for_project(self, project: str) -> None:
        # ORM cascade로 role_user, role_permission 행도 함께 삭제됩니다.
        for role in self.db.query(models.Role).filter(models.Role.project == project).all():
            self.db.delete(role)
        self.db.commit()

    @storage_operation
    def get_roles_for_user(self, user_id: int) -> List[models.Role]:
        return self.db.query(models.Role).join(
            models.RoleUser, models.RoleUser.role_id == models.Role.id
        ).filter(models.RoleUser.user_id == user_id).order_by(models.Role.id.asc()).all()

    @storage_operation
    def get_user_ids_for_role(self, role_id: int) -> List[int]:
        return [row[0] for row in self.db.query(models.RoleUser.user_id).filter(models.RoleUser.role_id == role_id).all()]

    @storage_operation
    def add_user_to_role(self, user_id: int, role_id: int) -> None:
        self.db.merge(models.RoleUser(user_id=user_id, role_id=role_id)) # INSERT OR IGNORE와 유사한 동작
        self.db.commit()

    @storage_operation
    def remove_user_from_role(self, user_id: int, role_id: int) -> None:
        association = self.db.query(models.RoleUser).filter(
            models.RoleUser.user_id == user_id,
            models.RoleUser.role_id == role_id
        ).first()
        if association:
            self.db.delete(association)
            self.db.commit()

    @storage_operation
    def create_role(self, name: str, role_type: str, project: Optional[str] = None, description: Optional[str] = None) -> models.Role:
        role = models.Role(name=name, type=role_type, project=project, description=description)
        self.db.add(role)
        self.db.commit()
        self.db.refresh(role)
        return role

    @storage_operation
    def add_permissions_to_role(self, role_id: int, permissions: List[str], project: Optional[str] = None) -> None:
        self.db.add_all([
            models.RolePermission(role_id=role_id, permission=permission, project=project)
            for permission in permissions
        ])
        self.db.commit()

    @storage_operation
    def remove_permission_from_role(self, role_id: int, permission: str, project: Optional[str] = None) -> None:
        query = self.db.query(models.RolePermission).filter(
            models.RolePermission.role_id == role_id,
            models.RolePermission.permission == permission
        )
        if project:
            query = query.filter(models.RolePermission.project == project)
        else:
            # 프로젝트 제한이 없는 grant는 NULL 또는 빈 문자열로 저장됩니다.
            query = query.filter(or_(models.RolePermission.project.is_(None), models.RolePermission.project == ""))
        query.delete(synchronize_session=False)
        self.db.commit()
