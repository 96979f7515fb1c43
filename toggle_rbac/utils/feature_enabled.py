from enum import Enum
from typing import Optional

from toggle_rbac.config import Settings


class FEATURES(str, Enum):
    RBAC = "rbac"


def is_feature_enabled(config: Optional[Settings], experimental_feature: str) -> bool:
    """
    설정의 experimental 맵에서 실험적 기능의 활성화 여부를 확인합니다.

    설정 객체나 experimental 맵이 없으면 비활성화된 것으로 간주합니다.
    """
    if config is None or not config.experimental:
        return False
    return bool(config.experimental.get(experimental_feature))
