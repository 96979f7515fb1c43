# toggle_rbac/app.py
from wsgiref.simple_server import make_server
import json
import logging
import re

# SQLAlchemy 및 의존성 임포트
from toggle_rbac.config import settings
from toggle_rbac.database.database import SessionLocal
from toggle_rbac.repositories.sqlalchemy import (
    SqlalchemyAccessRepository, SqlalchemyUserRepository, SqlalchemyProjectRepository,
    SqlalchemyFeatureToggleRepository, SqlalchemyEventRepository
)
from toggle_rbac.services.access_service import AccessService
from toggle_rbac.services.project_service import ProjectService
from toggle_rbac.services.exceptions import *
from toggle_rbac.middleware import rbac_middleware, USER_KEY, CHECK_RBAC_KEY
from toggle_rbac import permissions as p
from toggle_rbac.utils.wsgi import get_request_data, ROUTING_ARGS_KEY

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def require_permission(environ, permission):
    """
    RBAC 미들웨어가 붙인 검사 함수로 권한을 확인합니다.
    검사 함수가 없으면(RBAC 비활성) 모든 요청을 허용합니다.
    """
    check_rbac = environ.get(CHECK_RBAC_KEY)
    if check_rbac is not None and not check_rbac(permission):
        raise NoAccessError(permission)

def current_user(environ):
    return environ.get(USER_KEY)

def serialize_role_data(role_data):
    return {
        "role": role_data["role"].to_dict(),
        "permissions": role_data["permissions"],
        "users": [u.to_dict() for u in role_data["users"]],
    }

def handle_exception(e):
    error_map = {
        NoAccessError: "403 Forbidden",
        RoleNotFoundError: "404 Not Found",
        ProjectNotFoundError: "404 Not Found",
        ValueError: "400 Bad Request",
        InvalidArgumentError: "400 Bad Request",
        InvalidOperationError: "400 Bad Request",
        ConflictError: "409 Conflict",
    }
    status = error_map.get(type(e))
    if status is None:
        logger.exception("Unhandled exception: %s", e)
        status = "500 Internal Server Error"
    return status, json.dumps({"error": str(e)})

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def application(environ, start_response):
    db_session = SessionLocal()
    try:
        # 1. 의존성 생성 (Repositories -> Services)
        access_repo = SqlalchemyAccessRepository(db_session)
        user_repo = SqlalchemyUserRepository(db_session)
        project_repo = SqlalchemyProjectRepository(db_session)
        feature_toggle_repo = SqlalchemyFeatureToggleRepository(db_session)
        event_repo = SqlalchemyEventRepository(db_session)

        access_service = AccessService(access_repo, user_repo)
        project_service = ProjectService(project_repo, feature_toggle_repo, event_repo, access_service, settings)

        # 2. 생성된 객체들을 environ을 통해 핸들러와 RBAC 검사에 전달
        environ['repositories'] = {'feature_toggle': feature_toggle_repo}
        environ['services'] = {
            'access': access_service,
            'project': project_service,
        }

        # 3. 라우팅 및 핸들러 실행
        path = environ.get("PATH_INFO", "")
        method = environ.get("REQUEST_METHOD", "")

        project = r'(?P<project_id>[a-zA-Z0-9._~-]+)'
        routes = [
            ('GET', r'^/api/admin/rbac/permissions$', list_permissions_handler),
            ('GET', r'^/api/admin/rbac/roles$', list_roles_handler),
            ('GET', r'^/api/admin/rbac/roles/(?P<role_id>[0-9]+)$', get_role_handler),
            ('POST', r'^/api/admin/rbac/roles/(?P<role_id>[0-9]+)/users/(?P<user_id>[0-9]+)$', add_user_to_role_handler),
            ('DELETE', r'^/api/admin/rbac/roles/(?P<role_id>[0-9]+)/users/(?P<user_id>[0-9]+)$', remove_user_from_role_handler),
            ('POST', r'^/api/admin/rbac/roles/(?P<role_id>[0-9]+)/permissions/(?P<permission>[A-Z_]+)$', add_permission_to_role_handler),
            ('DELETE', r'^/api/admin/rbac/roles/(?P<role_id>[0-9]+)/permissions/(?P<permission>[A-Z_]+)$', remove_permission_from_role_handler),
            ('GET', r'^/api/admin/projects$', list_projects_handler),
            ('POST', r'^/api/admin/projects$', create_project_handler),
            ('PUT', rf'^/api/admin/projects/{project}$', update_project_handler),
            ('DELETE', rf'^/api/admin/projects/{project}$', delete_project_handler),
            ('GET', rf'^/api/admin/projects/{project}/users$', list_project_users_handler),
            ('POST', rf'^/api/admin/projects/{project}/users/(?P<user_id>[0-9]+)/roles/(?P<role_id>[0-9]+)$', add_project_user_handler),
            ('DELETE', rf'^/api/admin/projects/{project}/users/(?P<user_id>[0-9]+)/roles/(?P<role_id>[0-9]+)$', remove_project_user_handler),
        ]

        handler, path_args = None, {}
        for route_method, pattern, route_handler in routes:
            if method == route_method and (match := re.match(pattern, path)):
                handler, path_args = route_handler, match.groupdict()
                break

        if handler:
            environ[ROUTING_ARGS_KEY] = ((), path_args)
            status, response_body = handler(environ, **path_args)
        else:
            status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

    except Exception as e:
        status, response_body = handle_exception(e)
    finally:
        db_session.close()

    start_response(status, [("Content-Type", "application/json")])
    return [response_body.encode("utf-8")]

# --------------------------------------------------------------------------
## RBAC 관리 핸들러
# --------------------------------------------------------------------------

def list_permissions_handler(environ):
    require_permission(environ, p.READ_ROLE)
    permissions = environ['services']['access'].get_permissions()
    return '200 OK', json.dumps({"permissions": [perm.to_dict() for perm in permissions]})

def list_roles_handler(environ):
    require_permission(environ, p.READ_ROLE)
    roles = environ['services']['access'].get_roles()
    return '200 OK', json.dumps({"roles": [r.to_dict() for r in roles]})

def get_role_handler(environ, role_id):
    require_permission(environ, p.READ_ROLE)
    role_data = environ['services']['access'].get_role(int(role_id))
    return '200 OK', json.dumps({"role": serialize_role_data(role_data)})

def add_user_to_role_handler(environ, role_id, user_id):
    require_permission(environ, p.UPDATE_ROLE)
    environ['services']['access'].add_user_to_role(int(user_id), int(role_id))
    return '204 No Content', ''

def remove_user_from_role_handler(environ, role_id, user_id):
    require_permission(environ, p.UPDATE_ROLE)
    access_service = environ['services']['access']
    role = access_service.get_role_with_id(int(role_id))
    access_service.ensure_admin_remains(role)
    access_service.remove_user_from_role(int(user_id), role.id)
    return '204 No Content', ''

def add_permission_to_role_handler(environ, role_id, permission):
    require_permission(environ, p.UPDATE_ROLE)
    return '501 Not Implemented', json.dumps({"error": "Not implemented yet."})

def remove_permission_from_role_handler(environ, role_id, permission):
    require_permission(environ, p.UPDATE_ROLE)
    return '501 Not Implemented', json.dumps({"error": "Not implemented yet."})

# --------------------------------------------------------------------------
## 프로젝트 핸들러
# --------------------------------------------------------------------------

def list_projects_handler(environ):
    projects = environ['services']['project'].get_projects()
    return '200 OK', json.dumps({"projects": projects})

def create_project_handler(environ):
    require_permission(environ, p.CREATE_PROJECT)
    data = get_request_data(environ)
    project = environ['services']['project'].create_project(data, current_user(environ))
    return '201 Created', json.dumps(project)

def update_project_handler(environ, project_id):
    require_permission(environ, p.UPDATE_PROJECT)
    data = {**get_request_data(environ), "id": project_id}
    project = environ['services']['project'].update_project(data, current_user(environ))
    return '200 OK', json.dumps(project)

def delete_project_handler(environ, project_id):
    require_permission(environ, p.DELETE_PROJECT)
    environ['services']['project'].delete_project(project_id, current_user(environ))
    return '204 No Content', ''

def list_project_users_handler(environ, project_id):
    # 조회 시 누락된 기본 역할이 생성될 수 있습니다.
    require_permission(environ, p.UPDATE_PROJECT)
    access = environ['services']['project'].get_users_with_access(project_id, current_user(environ))
    return '200 OK', json.dumps({
        "roles": [r.to_dict() for r in access["roles"]],
        "users": access["users"],
    })

def add_project_user_handler(environ, project_id, user_id, role_id):
    require_permission(environ, p.UPDATE_PROJECT)
    environ['services']['project'].add_user(project_id, int(role_id), int(user_id))
    return '204 No Content', ''

def remove_project_user_handler(environ, project_id, user_id, role_id):
    require_permission(environ, p.UPDATE_PROJECT)
    environ['services']['project'].remove_user(project_id, int(role_id), int(user_id))
    return '204 No Content', ''

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

# 인증 계층(외부)이 environ['toggle_rbac.user']를 채운 뒤 이 앱을 호출합니다.
wsgi_app = rbac_middleware(application, settings)

if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    try:
        with make_server(settings.host, settings.port, wsgi_app) as httpd:
            logger.info("Serving %s on port %s...", settings.app_name, settings.port)
            httpd.serve_forever()
    except Exception as e:
        logger.exception("Error starting server: %s", e)
