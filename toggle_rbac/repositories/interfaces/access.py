from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any
from toggle_rbac.database import models

class IAccessRepository(ABC):
    """
    역할, 역할-권한(grant), 역할-사용자 연결에 대한 영속성 경계입니다.
    정책 판단은 하지 않으며, 모든 연산은 연결/제약 실패 시 StorageError를 발생시킵니다.
    """

    @abstractmethod
    def get_permissions_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        """
        사용자에게 할당된 역할들을 통해 도달 가능한 모든 grant를 조회합니다.

        Returns:
            project와 permission 키를 가진 딕셔너리의 리스트.
            (예: [{'project': 'default', 'permission': 'UPDATE_FEATURE'}])
        """
        pass

    @abstractmethod
    def get_permissions_for_role(self, role_id: int) -> List[Dict[str, Any]]:
        """특정 역할의 grant 목록을 조회합니다. 역할이 없으면 빈 리스트를 반환합니다."""
        pass

    @abstractmethod
    def get_roles(self) -> List[models.Role]:
        """모든 역할의 목록을 조회합니다."""
        pass

    @abstractmethod
    def get_role_with_id(self, role_id: int) -> models.Role:
        """
        고유 ID로 특정 역할을 조회합니다.

        Raises:
            RoleNotFoundError: 해당 ID의 역할이 없을 때.
        """
        pass

    @abstractmethod
    def get_roles_for_project(self, project: str) -> List[models.Role]:
        """특정 프로젝트에 속한 역할 목록을 조회합니다."""
        pass

    @abstractmethod
    def remove_roles_for_project(self, project: str) -> None:
        """프로젝트에 속한 모든 역할을 삭제합니다. grant와 사용자 할당도 함께 삭제됩니다."""
        pass

    @abstractmethod
    def get_roles_for_user(self, user_id: int) -> List[models.Role]:
        """사용자에게 할당된 역할 목록을 조회합니다."""
        pass

    @abstractmethod
    def get_user_ids_for_role(self, role_id: int) -> List[int]:
        """역할에 할당된 사용자 ID 목록을 조회합니다."""
        pass

    @abstractmethod
    def add_user_to_role(self, user_id: int, role_id: int) -> None:
        """사용자를 역할에 할당합니다. 이미 할당되어 있으면 무시합니다."""
        pass

    @abstractmethod
    def remove_user_from_role(self, user_id: int, role_id: int) -> None:
        """사용자의 역할 할당을 해제합니다. 할당이 없어도 오류가 아닙니다."""
        pass

    @abstractmethod
    def create_role(self, name: str, role_type: str, project: Optional[str] = None, description: Optional[str] = None) -> models.Role:
        """새로운 역할을 생성하고, 생성된 ID가 할당된 역할을 반환합니다."""
        pass

    @abstractmethod
    def add_permissions_to_role(self, role_id: int, permissions: List[str], project: Optional[str] = None) -> None:
        """여러 권한을 같은 project 값으로 역할에 일괄 추가합니다."""
        pass

    @abstractmethod
    def remove_permission_from_role(self, role_id: int, permission: str, project: Optional[str] = None) -> None:
        """역할에서 (permission, project) grant를 제거합니다. 없어도 오류가 아닙니다."""
        pass
