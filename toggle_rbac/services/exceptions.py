# toggle_rbac/services/exceptions.py

# --- Not Found Exceptions ---
class RoleNotFoundError(Exception):
    """역할을 찾을 수 없을 때"""
    pass

class ProjectNotFoundError(Exception):
    """프로젝트를 찾을 수 없을 때"""
    pass

# --- Validation/Policy Exceptions ---
class InvalidArgumentError(Exception):
    """프로젝트 범위 권한에 projectId가 없거나, 알 수 없는 권한 등 잘못된 인자가 전달되었을 때"""
    pass

class ConflictError(Exception):
    """프로젝트 id 중복, 이미 접근 권한이 있는 사용자 추가 등 고유성이 깨질 때"""
    pass

class InvalidOperationError(Exception):
    """default 프로젝트 삭제, 마지막 관리자 제거 등 정책상 허용되지 않는 작업일 때"""
    pass

# --- Storage Exceptions ---
class StorageError(Exception):
    """영속성 계층의 연결/제약 조건 실패 시"""
    pass

# --- Auth Exceptions ---
class NoAccessError(Exception):
    """RBAC 검사에서 요청한 권한이 거부되었을 때"""
    def __init__(self, permission: str):
        super().__init__(f"You need permission={permission} to perform this action")
        self.permission = permission
