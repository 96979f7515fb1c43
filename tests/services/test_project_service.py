# tests/services/test_project_service.py
import pytest
from unittest.mock import MagicMock

from toggle_rbac.config import Settings
from toggle_rbac.services.access_service import AccessService
from toggle_rbac.services.project_service import ProjectService, PROJECT_CREATED, PROJECT_UPDATED, PROJECT_DELETED
from toggle_rbac.services.exceptions import *
from toggle_rbac.repositories.interfaces import IProjectRepository, IFeatureToggleRepository, IEventRepository
from toggle_rbac.database import models
from toggle_rbac.user import RequestUser

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_project_repo() -> MagicMock:
    """IProjectRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=IProjectRepository)

@pytest.fixture
def mock_feature_toggle_repo() -> MagicMock:
    """IFeatureToggleRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=IFeatureToggleRepository)

@pytest.fixture
def mock_event_repo() -> MagicMock:
    """IEventRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=IEventRepository)

@pytest.fixture
def mock_access_service() -> MagicMock:
    """AccessService에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=AccessService)

@pytest.fixture
def user() -> RequestUser:
    return RequestUser(id=7, email="dev@example.com", username="dev")

def make_service(project_repo, feature_toggle_repo, event_repo, access_service, rbac: bool) -> ProjectService:
    settings = Settings(experimental={"rbac": rbac})
    return ProjectService(project_repo, feature_toggle_repo, event_repo, access_service, settings)

@pytest.fixture
def project_service(mock_project_repo, mock_feature_toggle_repo, mock_event_repo, mock_access_service) -> ProjectService:
    """RBAC이 켜진 ProjectService 인스턴스를 생성하고, 의존성을 주입합니다."""
    return make_service(mock_project_repo, mock_feature_toggle_repo, mock_event_repo, mock_access_service, rbac=True)

@pytest.fixture
def project_service_without_rbac(mock_project_repo, mock_feature_toggle_repo, mock_event_repo, mock_access_service) -> ProjectService:
    """RBAC이 꺼진 ProjectService 인스턴스를 생성합니다."""
    return make_service(mock_project_repo, mock_feature_toggle_repo, mock_event_repo, mock_access_service, rbac=False)

# ===================================================================
#  프로젝트 관리(Project Management) 테스트
# ===================================================================
class TestProjectManagement:
    def test_create_project_success(self, project_service, mock_project_repo, mock_event_repo, mock_access_service, user):
        """프로젝트 생성 시 기본 역할을 만들고 생성 이벤트를 기록해야 합니다."""
        # === Arrange (테스트 준비) ===
        data = {"id": "alpha", "name": "Alpha", "description": "first"}
        # 시나리오: 프로젝트 ID가 중복되지 않음
        mock_project_repo.exists.return_value = False
        mock_project_repo.create.side_effect = lambda project: project

        # === Act (실제 테스트 대상 실행) ===
        project = project_service.create_project(data, user)

        # === Assert (결과 검증) ===
        assert project == {"id": "alpha", "name": "Alpha", "description": "first"}
        mock_access_service.create_default_project_roles.assert_called_once_with(user, "alpha")
        mock_event_repo.store.assert_called_once_with(PROJECT_CREATED, "dev@example.com", data)

    def test_create_project_without_rbac_skips_roles(self, project_service_without_rbac, mock_project_repo, mock_access_service, user):
        """RBAC이 꺼져 있으면 기본 역할을 만들지 않아야 합니다."""
        mock_project_repo.exists.return_value = False
        mock_project_repo.create.side_effect = lambda project: project

        project_service_without_rbac.create_project({"id": "alpha", "name": "Alpha"}, user)

        mock_access_service.create_default_project_roles.assert_not_called()

    @pytest.mark.parametrize("data", [
        {"id": "has space", "name": "Bad"},
        {"id": "", "name": "Empty"},
        {"id": "alpha"},
    ])
    def test_create_project_invalid_data(self, project_service, mock_project_repo, data, user):
        """유효하지 않은 프로젝트 정보는 InvalidArgumentError를 발생시켜야 합니다."""
        with pytest.raises(InvalidArgumentError):
            project_service.create_project(data, user)

        mock_project_repo.create.assert_not_called()

    def test_create_project_duplicate_id(self, project_service, mock_project_repo, user):
        """중복된 ID로 생성 시 ConflictError를 발생시켜야 합니다."""
        mock_project_repo.exists.return_value = True

        with pytest.raises(ConflictError):
            project_service.create_project({"id": "alpha", "name": "Alpha"}, user)

        mock_project_repo.create.assert_not_called()

    def test_update_project_success(self, project_service, mock_project_repo, mock_event_repo, user):
        """프로젝트 수정 시 이름/설명을 변경하고 수정 이벤트를 기록해야 합니다."""
        # === Arrange (테스트 준비) ===
        existing = models.Project(id="alpha", name="Alpha")
        mock_project_repo.find_by_id.return_value = existing
        mock_project_repo.update.return_value = models.Project(id="alpha", name="Alpha 2", description="new")

        # === Act (실제 테스트 대상 실행) ===
        project = project_service.update_project({"id": "alpha", "name": "Alpha 2", "description": "new"}, user)

        # === Assert (결과 검증) ===
        assert project["name"] == "Alpha 2"
        mock_project_repo.update.assert_called_once_with(existing, "Alpha 2", "new")
        assert mock_event_repo.store.call_args.args[0] == PROJECT_UPDATED

    def test_update_project_not_found(self, project_service, mock_project_repo, user):
        """존재하지 않는 프로젝트 수정 시 ProjectNotFoundError를 발생시켜야 합니다."""
        mock_project_repo.find_by_id.return_value = None

        with pytest.raises(ProjectNotFoundError):
            project_service.update_project({"id": "ghost", "name": "Ghost"}, user)

    def test_delete_default_project_is_rejected(self, project_service, mock_project_repo, user):
        """default 프로젝트는 삭제할 수 없어야 합니다."""
        with pytest.raises(InvalidOperationError):
            project_service.delete_project("default", user)

        mock_project_repo.delete.assert_not_called()

    def test_delete_project_with_active_toggles_is_rejected(self, project_service, mock_project_repo, mock_feature_toggle_repo, user):
        """보관되지 않은 토글이 남은 프로젝트는 삭제할 수 없어야 합니다."""
        mock_feature_toggle_repo.get_features_by.return_value = [models.Feature(name="new-checkout", project="alpha")]

        with pytest.raises(InvalidOperationError):
            project_service.delete_project("alpha", user)

        mock_feature_toggle_repo.get_features_by.assert_called_once_with(project="alpha", archived=False)
        mock_project_repo.delete.assert_not_called()

    def test_delete_project_removes_roles(self, project_service, mock_project_repo, mock_feature_toggle_repo,
                                          mock_event_repo, mock_access_service, user):
        """프로젝트 삭제 시 삭제 이벤트를 기록하고 프로젝트 역할을 지워야 합니다."""
        # === Arrange (테스트 준비) ===
        project = models.Project(id="alpha", name="Alpha")
        mock_feature_toggle_repo.get_features_by.return_value = []
        mock_project_repo.find_by_id.return_value = project

        # === Act (실제 테스트 대상 실행) ===
        result = project_service.delete_project("alpha", user)

        # === Assert (결과 검증) ===
        assert result is True
        mock_project_repo.delete.assert_called_once_with(project)
        mock_event_repo.store.assert_called_once_with(PROJECT_DELETED, "dev@example.com", {"id": "alpha"})
        mock_access_service.remove_default_project_roles.assert_called_once_with(user, "alpha")

    def test_delete_project_role_cleanup_failure_is_logged(self, project_service, mock_project_repo, mock_feature_toggle_repo,
                                                           mock_access_service, user, caplog):
        """역할 삭제 실패는 프로젝트 삭제를 되돌리지 않고 로그만 남겨야 합니다."""
        # === Arrange (테스트 준비) ===
        mock_feature_toggle_repo.get_features_by.return_value = []
        mock_project_repo.find_by_id.return_value = models.Project(id="alpha", name="Alpha")
        mock_access_service.remove_default_project_roles.side_effect = StorageError("db down")

        # === Act (실제 테스트 대상 실행) ===
        assert project_service.delete_project("alpha", user) is True

        # === Assert (결과 검증) ===
        assert "alpha" in caplog.text and "db down" in caplog.text

    def test_delete_project_not_found(self, project_service, mock_project_repo, mock_feature_toggle_repo, user):
        mock_feature_toggle_repo.get_features_by.return_value = []
        mock_project_repo.find_by_id.return_value = None

        with pytest.raises(ProjectNotFoundError):
            project_service.delete_project("ghost", user)

    def test_validate_id(self, project_service, mock_project_repo):
        """validate_id는 형식과 고유성을 모두 검증해야 합니다."""
        mock_project_repo.exists.return_value = False
        assert project_service.validate_id("alpha-1") is True

        with pytest.raises(InvalidArgumentError):
            project_service.validate_id("not/url/friendly")

        mock_project_repo.exists.return_value = True
        with pytest.raises(ConflictError):
            project_service.validate_id("alpha-1")

# ===================================================================
#  프로젝트 접근 권한(Project Access) 테스트
# ===================================================================
class TestProjectAccess:
    @pytest.fixture(autouse=True)
    def existing_project(self, mock_project_repo):
        """시나리오: alpha 프로젝트가 존재함"""
        mock_project_repo.find_by_id.return_value = models.Project(id="alpha", name="Alpha")

    @pytest.fixture
    def admin_role(self):
        return models.Role(id=10, name="Admin", type=models.PROJECT_ADMIN_ROLE_TYPE, project="alpha")

    @pytest.fixture
    def regular_role(self):
        return models.Role(id=11, name="Regular", type=models.PROJECT_REGULAR_ROLE_TYPE, project="alpha")

    def test_get_users_with_access(self, project_service, mock_access_service, admin_role, user):
        """프로젝트 역할과 사용자 목록을 그대로 반환해야 합니다."""
        users = [{"id": 1, "username": "alice", "role_id": 10}]
        mock_access_service.get_project_role_users.return_value = ([admin_role], users)

        result = project_service.get_users_with_access("alpha", user)

        assert result == {"roles": [admin_role], "users": users}
        mock_access_service.create_default_project_roles.assert_not_called()

    def test_get_users_with_access_creates_missing_roles(self, project_service, mock_access_service, admin_role, user):
        """역할이 없는 프로젝트는 기본 역할을 만든 뒤 다시 조회해야 합니다."""
        # === Arrange (테스트 준비) ===
        mock_access_service.get_project_role_users.side_effect = [([], []), ([admin_role], [])]

        # === Act (실제 테스트 대상 실행) ===
        result = project_service.get_users_with_access("alpha", user)

        # === Assert (결과 검증) ===
        mock_access_service.create_default_project_roles.assert_called_once_with(user, "alpha")
        assert result["roles"] == [admin_role]

    def test_get_users_with_access_unknown_project(self, project_service, mock_project_repo, mock_access_service, user):
        """존재하지 않는 프로젝트는 역할을 만들지 않고 ProjectNotFoundError를 발생시켜야 합니다."""
        # === Arrange (테스트 준비) ===
        mock_project_repo.find_by_id.return_value = None

        # === Act & Assert (실행 및 검증) ===
        with pytest.raises(ProjectNotFoundError):
            project_service.get_users_with_access("future", user)

        mock_access_service.get_project_role_users.assert_not_called()
        mock_access_service.create_default_project_roles.assert_not_called()

    def test_get_users_with_access_without_rbac_does_not_create_roles(self, project_service_without_rbac, mock_access_service, user):
        mock_access_service.get_project_role_users.return_value = ([], [])

        result = project_service_without_rbac.get_users_with_access("alpha", user)

        assert result == {"roles": [], "users": []}
        mock_access_service.create_default_project_roles.assert_not_called()

    def test_add_user_success(self, project_service, mock_access_service, admin_role, regular_role):
        """프로젝트 역할에 새 사용자를 추가해야 합니다."""
        mock_access_service.get_project_role_users.return_value = (
            [admin_role, regular_role], [{"id": 1, "username": "alice", "role_id": 10}]
        )

        project_service.add_user("alpha", 11, 2)

        mock_access_service.add_user_to_role.assert_called_once_with(2, 11)

    def test_add_user_role_not_in_project(self, project_service, mock_access_service, admin_role):
        """다른 프로젝트의 역할에는 추가할 수 없어야 합니다."""
        mock_access_service.get_project_role_users.return_value = ([admin_role], [])

        with pytest.raises(RoleNotFoundError):
            project_service.add_user("alpha", 99, 2)

        mock_access_service.add_user_to_role.assert_not_called()

    def test_add_user_already_has_access(self, project_service, mock_access_service, admin_role, regular_role):
        """이미 프로젝트 접근 권한이 있는 사용자는 ConflictError를 발생시켜야 합니다."""
        mock_access_service.get_project_role_users.return_value = (
            [admin_role, regular_role], [{"id": 1, "username": "alice", "role_id": 10}]
        )

        with pytest.raises(ConflictError):
            project_service.add_user("alpha", 11, 1)

        mock_access_service.add_user_to_role.assert_not_called()

    def test_remove_last_admin_is_rejected(self, project_service, mock_access_service, admin_role):
        """관리자 수 검사가 거부하면 역할에서 제거하지 않아야 합니다."""
        # === Arrange (테스트 준비) ===
        mock_access_service.get_roles_for_project.return_value = [admin_role]
        # 시나리오: 관리자 역할에 사용자가 한 명뿐
        mock_access_service.ensure_admin_remains.side_effect = InvalidOperationError("A project must have at least one admin")

        # === Act & Assert (실행 및 검증) ===
        with pytest.raises(InvalidOperationError, match="at least one admin"):
            project_service.remove_user("alpha", 10, 1)

        mock_access_service.ensure_admin_remains.assert_called_once_with(admin_role)
        mock_access_service.remove_user_from_role.assert_not_called()

    def test_remove_user_checks_admin_count_before_removing(self, project_service, mock_access_service, admin_role):
        mock_access_service.get_roles_for_project.return_value = [admin_role]

        project_service.remove_user("alpha", 10, 2)

        mock_access_service.ensure_admin_remains.assert_called_once_with(admin_role)
        mock_access_service.remove_user_from_role.assert_called_once_with(2, 10)

    def test_remove_user_role_not_in_project(self, project_service, mock_access_service, admin_role):
        mock_access_service.get_roles_for_project.return_value = [admin_role]

        with pytest.raises(RoleNotFoundError):
            project_service.remove_user("alpha", 99, 1)
