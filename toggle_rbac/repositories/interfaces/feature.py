from abc import ABC, abstractmethod
from typing import List, Optional
from toggle_rbac.database import models

class IFeatureToggleRepository(ABC):
    @abstractmethod
    def get_project_id(self, feature_name: str) -> Optional[str]:
        """기능 토글이 속한 프로젝트의 ID를 조회합니다. 토글이 없으면 None을 반환합니다."""
        pass

    @abstractmethod
    def get_features_by(self, project: str, archived: bool = False) -> List[models.Feature]:
        """프로젝트에 속한 기능 토글 목록을 보관(archived) 여부로 걸러 조회합니다."""
        pass
