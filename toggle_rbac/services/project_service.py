import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from toggle_rbac.config import Settings
from toggle_rbac.database import models
from toggle_rbac.repositories.interfaces import (
    IProjectRepository, IFeatureToggleRepository, IEventRepository
)
from toggle_rbac.services.access_service import AccessService
from toggle_rbac.services.exceptions import (
    ProjectNotFoundError, RoleNotFoundError, InvalidArgumentError,
    ConflictError, InvalidOperationError, StorageError
)
from toggle_rbac.services.schemas import ProjectIdSchema, ProjectSchema
from toggle_rbac.user import RequestUser
from toggle_rbac.utils.feature_enabled import FEATURES, is_feature_enabled

logger = logging.getLogger(__name__)

PROJECT_CREATED = "project-created"
PROJECT_UPDATED = "project-updated"
PROJECT_DELETED = "project-deleted"

DEFAULT_PROJECT = "default"


def _validate(schema, data: Dict[str, Any]):
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidArgumentError(str(e)) from e


class ProjectService:
    """프로젝트 수명 주기와, 프로젝트 단위 접근 권한(기본 역할, 멤버) 관리를 제공합니다."""

    def __init__(self, project_repo: IProjectRepository, feature_toggle_repo: IFeatureToggleRepository,
                 event_repo: IEventRepository, access_service: AccessService, settings: Settings):
        """
        ProjectService를 초기화합니다.

        Args:
            project_repo: 프로젝트 데이터에 접근하기 위한 리포지토리.
            feature_toggle_repo: 프로젝트 삭제 시 활성 토글을 확인하기 위한 리포지토리.
            event_repo: 프로젝트 생성/수정/삭제 이벤트를 기록하기 위한 리포지토리.
            access_service: 프로젝트 기본 역할을 만들고 지우기 위한 접근 제어 서비스.
            settings: RBAC 기능 플래그를 읽을 설정 객체.
        """
        self.project_repo = project_repo
        self.feature_toggle_repo = feature_toggle_repo
        self.event_repo = event_repo
        self.access_service = access_service
        self.rbac_enabled = is_feature_enabled(settings, FEATURES.RBAC)

    def get_projects(self) -> List[Dict[str, Any]]:
        """모든 프로젝트의 목록을 조회합니다."""
        return [project.to_dict() for project in self.project_repo.list_all()]

    def get_project(self, project_id: str) -> Dict[str, Any]:
        """
        ID로 특정 프로젝트를 조회합니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
        """
        project = self.project_repo.find_by_id(project_id)
        if not project:
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")
        return project.to_dict()

    def create_project(self, data: Dict[str, Any], user: Optional[RequestUser]) -> Dict[str, Any]:
        """
        새로운 프로젝트를 생성하고, RBAC이 켜져 있으면 기본 프로젝트 역할을 만듭니다.

        Args:
            data: id, name, description을 담은 프로젝트 정보.
            user: 프로젝트를 생성하는 사용자. 관리자 역할에 할당됩니다.

        Returns:
            생성된 프로젝트의 id, name, description을 담은 딕셔너리.

        Raises:
            InvalidArgumentError: 프로젝트 정보가 유효하지 않을 때.
            ConflictError: 동일한 ID의 프로젝트가 이미 존재할 때.
        """
        project = _validate(ProjectSchema, data)
        self.validate_unique_id(project.id)

        created = self.project_repo.create(
            models.Project(id=project.id, name=project.name, description=project.description)
        )

        if self.rbac_enabled:
            self.access_service.create_default_project_roles(user, created.id)

        self.event_repo.store(PROJECT_CREATED, _created_by(user), project.model_dump())
        return created.to_dict()

    def update_project(self, data: Dict[str, Any], user: Optional[RequestUser]) -> Dict[str, Any]:
        """
        프로젝트의 이름과 설명을 수정합니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            InvalidArgumentError: 프로젝트 정보가 유효하지 않을 때.
        """
        existing = self.project_repo.find_by_id(data.get("id"))
        if not existing:
            raise ProjectNotFoundError(f"Project with id '{data.get('id')}' not found.")
        project = _validate(ProjectSchema, data)

        updated = self.project_repo.update(existing, project.name, project.description)
        self.event_repo.store(PROJECT_UPDATED, _created_by(user), project.model_dump())
        return updated.to_dict()

    def delete_project(self, project_id: str, user: Optional[RequestUser]) -> bool:
        """
        프로젝트를 삭제합니다. default 프로젝트와 활성 토글이 남은 프로젝트는 삭제할 수 없습니다.

        RBAC이 켜져 있으면 프로젝트의 역할도 지웁니다. 프로젝트가 이미 삭제된 뒤이므로
        역할 삭제 실패는 로그만 남깁니다. 남은 역할은 어떤 프로젝트 조회에도 걸리지 않습니다.

        Raises:
            InvalidOperationError: default 프로젝트이거나, 보관되지 않은 토글이 남아 있을 때.
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
        """
        if project_id == DEFAULT_PROJECT:
            raise InvalidOperationError("You can not delete the default project!")

        if self.feature_toggle_repo.get_features_by(project=project_id, archived=False):
            raise InvalidOperationError("You can not delete as project with active feature toggles")

        project = self.project_repo.find_by_id(project_id)
        if not project:
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")
        self.project_repo.delete(project)

        self.event_repo.store(PROJECT_DELETED, _created_by(user), {"id": project_id})

        if self.rbac_enabled:
            try:
                self.access_service.remove_default_project_roles(user, project_id)
            except StorageError as e:
                logger.error("Could not remove roles for deleted project=%s: %s", project_id, e)
        return True

    def validate_id(self, project_id: str) -> bool:
        """
        프로젝트 ID의 형식과 고유성을 검증합니다.

        Raises:
            InvalidArgumentError: URL에 쓸 수 없는 형식일 때.
            ConflictError: 동일한 ID의 프로젝트가 이미 존재할 때.
        """
        _validate(ProjectIdSchema, {"id": project_id})
        self.validate_unique_id(project_id)
        return True

    def validate_unique_id(self, project_id: str) -> None:
        if self.project_repo.exists(project_id):
            raise ConflictError("A project with this id already exists.")

    # ------------------------------------------------------------------
    # 프로젝트 접근 권한 (RBAC)
    # ------------------------------------------------------------------

    def get_users_with_access(self, project_id: str, user: Optional[RequestUser]) -> Dict[str, Any]:
        """
        프로젝트의 역할과, 각 역할에 할당된 사용자 목록을 조회합니다.

        기본 역할이 없는 기존 프로젝트는 RBAC이 켜져 있을 때 기본 역할을 만든 뒤 다시 조회합니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
        """
        if not self.project_repo.find_by_id(project_id):
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")

        roles, users = self.access_service.get_project_role_users(project_id)
        if not roles and self.rbac_enabled:
            logger.warning("Creating missing roles for project %s", project_id)
            self.access_service.create_default_project_roles(user, project_id)
            roles, users = self.access_service.get_project_role_users(project_id)
        return {"roles": roles, "users": users}

    def add_user(self, project_id: str, role_id: int, user_id: int) -> None:
        """
        사용자를 프로젝트 역할에 추가합니다.

        Raises:
            RoleNotFoundError: 역할이 해당 프로젝트에 속하지 않을 때.
            ConflictError: 사용자가 이미 프로젝트 접근 권한을 가지고 있을 때.
        """
        roles, users = self.access_service.get_project_role_users(project_id)

        role = next((r for r in roles if r.id == role_id), None)
        if not role:
            raise RoleNotFoundError(f"Could not find roleId={role_id} on project={project_id}")

        if any(u["id"] == user_id for u in users):
            raise ConflictError(f"User already have access to project={project_id}")

        self.access_service.add_user_to_role(user_id, role.id)

    def remove_user(self, project_id: str, role_id: int, user_id: int) -> None:
        """
        사용자를 프로젝트 역할에서 제거합니다. 프로젝트에는 항상 관리자가 한 명 이상 남아야 합니다.

        Raises:
            RoleNotFoundError: 역할이 해당 프로젝트에 속하지 않을 때.
            InvalidOperationError: 마지막 남은 프로젝트 관리자를 제거하려 할 때.
        """
        roles = self.access_service.get_roles_for_project(project_id)
        role = next((r for r in roles if r.id == role_id), None)
        if not role:
            raise RoleNotFoundError(f"Couldn't find roleId={role_id} on project={project_id}")

        self.access_service.ensure_admin_remains(role)

        self.access_service.remove_user_from_role(user_id, role.id)


def _created_by(user: Optional[RequestUser]) -> Optional[str]:
    return user.created_by if user else None
