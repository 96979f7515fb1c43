import functools
import logging

from toggle_rbac.config import Settings
from toggle_rbac.permissions import ADMIN, CREATE_FEATURE, UPDATE_FEATURE, DELETE_FEATURE
from toggle_rbac.utils.feature_enabled import FEATURES, is_feature_enabled
from toggle_rbac.utils.wsgi import get_request_data, get_route_params

logger = logging.getLogger(__name__)

USER_KEY = "toggle_rbac.user"
CHECK_RBAC_KEY = "toggle_rbac.check_rbac"


def rbac_middleware(app, settings: Settings):
    """
    RBAC이 켜져 있으면 app을 RbacMiddleware로 감싸고, 꺼져 있으면 app을 그대로 반환합니다.
    꺼져 있을 때는 모든 요청이 검사 없이 통과합니다.
    """
    if not is_feature_enabled(settings, FEATURES.RBAC):
        return app
    logger.info("Enabling RBAC")
    return RbacMiddleware(app)


class RbacMiddleware:
    """
    요청마다 권한 검사 함수(environ['toggle_rbac.check_rbac'])를 붙이는 WSGI 미들웨어입니다.

    검사 함수는 애플리케이션이 요청마다 environ['services'], environ['repositories']에
    넣어 둔 협력 객체를 호출 시점에 찾습니다.
    """

    def __init__(self, app):
        self.app = app

    def __call__(self, environ, start_response):
        environ[CHECK_RBAC_KEY] = functools.partial(check_rbac, environ)
        return self.app(environ, start_response)


def check_rbac(environ, permission: str) -> bool:
    """
    요청의 사용자가 permission을 가지고 있는지 확인합니다.

    - ADMIN 권한을 가진 API 토큰(서비스 주체)은 저장소를 조회하지 않고 통과합니다.
    - id가 있는 사용자가 요청에 없으면 설정 오류로 보고 거부합니다.
    - 토글 수정/삭제는 토글이 속한 프로젝트, 토글 생성은 본문의 project,
      나머지는 경로의 project_id를 프로젝트 범위로 사용합니다.

    Returns:
        허용되면 True, 아니면 False. 거부 사유는 구분하지 않습니다.
    """
    user = environ.get(USER_KEY)

    if user is not None and user.is_api:
        return ADMIN in user.permissions

    if user is None or not user.id:
        logger.error("RBAC requires a user with a userId on the request.")
        return False

    params = get_route_params(environ)
    project_id = params.get("project_id")

    # 토글 경로는 프로젝트 ID 대신 토글 이름을 담고 있습니다.
    if permission in (UPDATE_FEATURE, DELETE_FEATURE):
        feature_toggle_repo = environ["repositories"]["feature_toggle"]
        project_id = feature_toggle_repo.get_project_id(params.get("feature_name"))
    elif permission == CREATE_FEATURE:
        project_id = get_request_data(environ).get("project")

    access_service = environ["services"]["access"]
    return access_service.has_permission(user, permission, project_id)
