from abc import ABC, abstractmethod
from typing import List
from toggle_rbac.database import models

class IUserRepository(ABC):
    @abstractmethod
    def get_all_with_id(self, user_ids: List[int]) -> List[models.User]:
        """주어진 ID 목록에 해당하는 사용자들을 조회합니다. 없는 ID는 무시됩니다."""
        pass
