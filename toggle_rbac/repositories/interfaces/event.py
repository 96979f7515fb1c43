from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from toggle_rbac.database import models

class IEventRepository(ABC):
    @abstractmethod
    def store(self, event_type: str, created_by: Optional[str], data: Dict[str, Any]) -> models.Event:
        """도메인 이벤트를 이벤트 로그에 추가합니다."""
        pass
