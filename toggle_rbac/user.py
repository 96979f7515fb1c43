from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RequestUser:
    """
    외부 인증 계층이 요청(environ['toggle_rbac.user'])에 실어 보내는 호출자 신원입니다.
    id는 역할 할당(role_user)의 조인 키입니다.
    """
    id: Optional[int] = None
    is_api: bool = False
    permissions: List[str] = field(default_factory=list)
    email: Optional[str] = None
    username: Optional[str] = None

    @property
    def created_by(self) -> Optional[str]:
        return self.email or self.username
