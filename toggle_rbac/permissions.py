from enum import Enum
from typing import List, NamedTuple

ADMIN = "ADMIN"
CREATE_FEATURE = "CREATE_FEATURE"
UPDATE_FEATURE = "UPDATE_FEATURE"
DELETE_FEATURE = "DELETE_FEATURE"
CREATE_STRATEGY = "CREATE_STRATEGY"
UPDATE_STRATEGY = "UPDATE_STRATEGY"
DELETE_STRATEGY = "DELETE_STRATEGY"
UPDATE_APPLICATION = "UPDATE_APPLICATION"
CREATE_CONTEXT_FIELD = "CREATE_CONTEXT_FIELD"
UPDATE_CONTEXT_FIELD = "UPDATE_CONTEXT_FIELD"
DELETE_CONTEXT_FIELD = "DELETE_CONTEXT_FIELD"
CREATE_PROJECT = "CREATE_PROJECT"
UPDATE_PROJECT = "UPDATE_PROJECT"
DELETE_PROJECT = "DELETE_PROJECT"
CREATE_ADDON = "CREATE_ADDON"
UPDATE_ADDON = "UPDATE_ADDON"
DELETE_ADDON = "DELETE_ADDON"
READ_ROLE = "READ_ROLE"
UPDATE_ROLE = "UPDATE_ROLE"

# 모든 프로젝트에 일치하는 grant의 project 값
ALL_PROJECTS = "*"

PERMISSION_NAMES = [
    ADMIN,
    CREATE_FEATURE,
    UPDATE_FEATURE,
    DELETE_FEATURE,
    CREATE_STRATEGY,
    UPDATE_STRATEGY,
    DELETE_STRATEGY,
    UPDATE_APPLICATION,
    CREATE_CONTEXT_FIELD,
    UPDATE_CONTEXT_FIELD,
    DELETE_CONTEXT_FIELD,
    CREATE_PROJECT,
    UPDATE_PROJECT,
    DELETE_PROJECT,
    CREATE_ADDON,
    UPDATE_ADDON,
    DELETE_ADDON,
    READ_ROLE,
    UPDATE_ROLE,
]

# 프로젝트 기본 역할이 부여받는 권한 묶음
PROJECT_ADMIN = [
    UPDATE_PROJECT,
    DELETE_PROJECT,
    CREATE_FEATURE,
    UPDATE_FEATURE,
    DELETE_FEATURE,
]

PROJECT_REGULAR = [
    CREATE_FEATURE,
    UPDATE_FEATURE,
    DELETE_FEATURE,
]


class PermissionType(str, Enum):
    ROOT = "root"
    PROJECT = "project"


class Permission(NamedTuple):
    name: str
    type: PermissionType

    def to_dict(self):
        return {"name": self.name, "type": self.type.value}


def is_project_permission(permission: str) -> bool:
    return permission in PROJECT_ADMIN


def is_known_permission(permission: str) -> bool:
    return permission in _PERMISSIONS_BY_NAME


_CATALOG = [
    Permission(name, PermissionType.PROJECT if is_project_permission(name) else PermissionType.ROOT)
    for name in PERMISSION_NAMES
]
_PERMISSIONS_BY_NAME = {p.name: p for p in _CATALOG}


def list_permissions() -> List[Permission]:
    """
    권한 카탈로그를 선언 순서대로 반환합니다.

    PROJECT_ADMIN에 속한 권한은 프로젝트 범위, 나머지는 루트 범위입니다.
    ADMIN은 범위 검사 없이 모든 검사를 통과시키는 슈퍼유저 권한입니다.
    """
    return list(_CATALOG)
