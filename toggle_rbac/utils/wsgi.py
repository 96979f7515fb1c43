import json
from typing import Any, Dict

REQUEST_JSON_KEY = "toggle_rbac.json"
ROUTING_ARGS_KEY = "wsgiorg.routing_args"


def get_request_data(environ) -> Dict[str, Any]:
    """
    요청 본문(JSON)을 읽어 딕셔너리로 반환합니다.

    wsgi.input은 한 번만 읽을 수 있으므로, 파싱 결과를 environ에 보관하여
    핸들러와 RBAC 검사가 같은 본문을 공유하도록 합니다.

    Raises:
        ValueError: 본문이 올바른 JSON 객체가 아닐 때.
    """
    if REQUEST_JSON_KEY not in environ:
        try:
            content_length = int(environ.get("CONTENT_LENGTH") or 0)
            data = json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
        except (ValueError, json.JSONDecodeError):
            raise ValueError("Invalid or missing JSON body.")
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object.")
        environ[REQUEST_JSON_KEY] = data
    return environ[REQUEST_JSON_KEY]


def get_route_params(environ) -> Dict[str, str]:
    """라우터가 wsgiorg.routing_args에 기록한 경로 파라미터를 반환합니다."""
    _, params = environ.get(ROUTING_ARGS_KEY, ((), {}))
    return params
