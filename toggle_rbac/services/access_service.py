import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from toggle_rbac import permissions as p
from toggle_rbac.database import models
from toggle_rbac.repositories.interfaces import IAccessRepository, IUserRepository
from toggle_rbac.services.exceptions import InvalidArgumentError, InvalidOperationError, StorageError
from toggle_rbac.user import RequestUser

logger = logging.getLogger(__name__)


class RoleType(str, Enum):
    ADMIN = "Admin"
    REGULAR = "Regular"
    READ = "Read"


class AccessService:
    """권한 판정(접근 제어)과 역할/권한/사용자 할당 관리를 담당하는 정책 서비스입니다."""

    def __init__(self, access_repo: IAccessRepository, user_repo: IUserRepository):
        """
        AccessService를 초기화합니다. 서비스는 상태를 캐시하지 않으며, 모든 판정은 저장소를 다시 읽습니다.

        Args:
            access_repo: 역할, grant, 역할-사용자 연결에 접근하기 위한 리포지토리.
            user_repo: 역할 멤버를 사용자 정보로 채우기 위한 사용자 디렉터리.
        """
        self.access_repo = access_repo
        self.user_repo = user_repo

    # ------------------------------------------------------------------
    # 권한 판정
    # ------------------------------------------------------------------

    def has_permission(self, user: RequestUser, permission: str, project_id: Optional[str] = None) -> bool:
        """
        사용자가 (선택적으로 프로젝트 범위에서) 요청한 권한을 가지고 있는지 확인합니다.

        사용자 역할의 grant 중 프로젝트 제한이 없거나, project_id와 같거나, ALL_PROJECTS인 것만 남긴 뒤
        요청한 권한 또는 ADMIN과 일치하는 grant가 있으면 허용합니다.
        프로젝트 범위 권한에 project_id를 넘기는 것은 호출자의 책임입니다.

        Args:
            user: 요청한 사용자. user.id가 역할 할당의 조인 키입니다.
            permission: 확인할 권한 이름.
            project_id: 권한을 확인할 프로젝트의 ID.

        Returns:
            허용되면 True, 아니면 False.
        """
        logger.debug("Checking permission=%s, userId=%s projectId=%s", permission, user.id, project_id)

        grants = self.access_repo.get_permissions_for_user(user.id)
        return any(
            grant["permission"] in (permission, p.ADMIN)
            for grant in grants
            if not grant["project"] or grant["project"] in (project_id, p.ALL_PROJECTS)
        )

    def get_permissions(self) -> List[p.Permission]:
        """권한 카탈로그를 반환합니다."""
        return p.list_permissions()

    # ------------------------------------------------------------------
    # 역할-사용자 할당
    # ------------------------------------------------------------------

    def add_user_to_role(self, user_id: int, role_id: int) -> None:
        self.access_repo.add_user_to_role(user_id, role_id)

    def remove_user_from_role(self, user_id: int, role_id: int) -> None:
        self.access_repo.remove_user_from_role(user_id, role_id)

    def ensure_admin_remains(self, role: models.Role) -> None:
        """
        project-admin 역할에서 사용자를 제거하기 전에 호출합니다.
        저장소의 제거 연산은 관리자 수를 확인하지 않으므로, 역할-사용자 제거 경로마다 이 검사를 거쳐야 합니다.

        Raises:
            InvalidOperationError: 역할에 남은 관리자가 한 명 이하일 때.
        """
        if role.type != models.PROJECT_ADMIN_ROLE_TYPE:
            return
        if len(self.get_users_for_role(role.id)) < 2:
            raise InvalidOperationError("A project must have at least one admin")

    def set_user_root_role(self, user_id: int, role_type: str) -> None:
        """
        사용자의 루트 역할을 교체합니다. 사용자는 동시에 최대 하나의 루트 역할만 가집니다.

        대상 역할을 찾지 못하거나 교체 중 저장소 오류가 발생하면 경고만 남기고 무시합니다.
        호출자가 role_type을 이미 검증한 재할당 흐름을 위한 best-effort 연산입니다.

        Args:
            user_id: 루트 역할을 바꿀 사용자의 ID.
            role_type: 새 루트 역할의 이름. (예: 'Admin', 'Regular', 'Read')
        """
        role_name = role_type.value if isinstance(role_type, RoleType) else role_type
        role = next(
            (r for r in self.access_repo.get_roles() if r.type == models.ROOT_ROLE_TYPE and r.name == role_name),
            None
        )
        if not role:
            logger.warning("Could not find root role=%s, userId=%s keeps current roles", role_name, user_id)
            return

        current_root_roles = [r for r in self.access_repo.get_roles_for_user(user_id) if r.type == models.ROOT_ROLE_TYPE]
        try:
            for current in current_root_roles:
                self.access_repo.remove_user_from_role(user_id, current.id)
            self.access_repo.add_user_to_role(user_id, role.id)
        except StorageError as e:
            logger.warning("Could not add role=%s to userId=%s: %s", role_name, user_id, e)

    # ------------------------------------------------------------------
    # 역할-권한(grant) 관리
    # ------------------------------------------------------------------

    def add_permission_to_role(self, role_id: int, permission: str, project_id: Optional[str] = None) -> None:
        """
        역할에 권한을 추가합니다.

        Raises:
            InvalidArgumentError: 카탈로그에 없는 권한이거나, 프로젝트 범위 권한에 project_id가 없을 때.
        """
        self._validate_grant(permission, project_id)
        self.access_repo.add_permissions_to_role(role_id, [permission], project_id)

    def remove_permission_from_role(self, role_id: int, permission: str, project_id: Optional[str] = None) -> None:
        """
        역할에서 권한을 제거합니다.

        Raises:
            InvalidArgumentError: 카탈로그에 없는 권한이거나, 프로젝트 범위 권한에 project_id가 없을 때.
        """
        self._validate_grant(permission, project_id)
        self.access_repo.remove_permission_from_role(role_id, permission, project_id)

    def _validate_grant(self, permission: str, project_id: Optional[str]) -> None:
        if not p.is_known_permission(permission):
            raise InvalidArgumentError(f"Unknown permission={permission}")
        if p.is_project_permission(permission) and not project_id:
            raise InvalidArgumentError(f"ProjectId cannot be empty for permission={permission}")

    # ------------------------------------------------------------------
    # 역할 조회
    # ------------------------------------------------------------------

    def get_roles(self) -> List[models.Role]:
        return self.access_repo.get_roles()

    def get_role_with_id(self, role_id: int) -> models.Role:
        return self.access_repo.get_role_with_id(role_id)

    def get_role(self, role_id: int) -> Dict[str, Any]:
        """
        역할과 그 역할의 grant, 할당된 사용자를 한 번에 조회합니다.

        Returns:
            role, permissions, users 키를 가진 딕셔너리.

        Raises:
            RoleNotFoundError: 해당 ID의 역할을 찾을 수 없을 때.
        """
        role = self.access_repo.get_role_with_id(role_id)
        permissions = self.access_repo.get_permissions_for_role(role_id)
        users = self.get_users_for_role(role_id)
        return {"role": role, "permissions": permissions, "users": users}

    def get_roles_for_project(self, project_id: str) -> List[models.Role]:
        return self.access_repo.get_roles_for_project(project_id)

    def get_roles_for_user(self, user_id: int) -> List[models.Role]:
        return self.access_repo.get_roles_for_user(user_id)

    def get_users_for_role(self, role_id: int) -> List[models.User]:
        user_ids = self.access_repo.get_user_ids_for_role(role_id)
        return self.user_repo.get_all_with_id(user_ids)

    def get_project_role_users(self, project_id: str) -> Tuple[List[models.Role], List[Dict[str, Any]]]:
        """
        프로젝트의 각 역할과, 그 역할에 할당된 사용자 목록(role_id 포함)을 조회합니다.

        Returns:
            (역할 리스트, 사용자 딕셔너리 리스트) 튜플.
            (예: ([<Role 3>], [{'id': 1, 'username': 'admin', ..., 'role_id': 3}]))
        """
        roles = self.access_repo.get_roles_for_project(project_id)
        users = [
            {**user.to_dict(), "role_id": role.id}
            for role in roles
            for user in self.get_users_for_role(role.id)
        ]
        return roles, users

    # ------------------------------------------------------------------
    # 프로젝트 기본 역할 수명 주기
    # ------------------------------------------------------------------

    def create_default_project_roles(self, owner: Optional[RequestUser], project_id: str) -> None:
        """
        프로젝트의 기본 역할(관리자/일반)을 생성합니다.

        관리자 역할에는 PROJECT_ADMIN 권한을, 일반 역할에는 PROJECT_REGULAR 권한을 부여하고,
        owner에게 id가 있으면 관리자 역할에 할당합니다. 여러 저장소 호출은 하나의 트랜잭션으로
        묶이지 않습니다.

        Args:
            owner: 프로젝트를 생성한 사용자. id가 없으면 할당을 건너뜁니다.
            project_id: 기본 역할을 만들 프로젝트의 ID.

        Raises:
            InvalidArgumentError: project_id가 비어 있을 때.
        """
        if not project_id:
            raise InvalidArgumentError("ProjectId cannot be empty")

        admin_role = self.access_repo.create_role(
            RoleType.ADMIN.value,
            models.PROJECT_ADMIN_ROLE_TYPE,
            project_id,
            f'Admin role for project "{project_id}"',
        )
        self.access_repo.add_permissions_to_role(admin_role.id, p.PROJECT_ADMIN, project_id)

        if owner is not None and owner.id:
            logger.info("Making %s admin of %s via roleId=%s", owner.id, project_id, admin_role.id)
            self.access_repo.add_user_to_role(owner.id, admin_role.id)
        else:
            logger.warning("No owner id available, project=%s is created without an admin", project_id)

        regular_role = self.access_repo.create_role(
            RoleType.REGULAR.value,
            models.PROJECT_REGULAR_ROLE_TYPE,
            project_id,
            f'Contributor role for project "{project_id}"',
        )
        self.access_repo.add_permissions_to_role(regular_role.id, p.PROJECT_REGULAR, project_id)

    def remove_default_project_roles(self, owner: Optional[RequestUser], project_id: str) -> None:
        logger.info("Removing project roles for %s", project_id)
        self.access_repo.remove_roles_for_project(project_id)
