from sqlalchemy import Column, String, Text, DateTime, func
from ..database import Base


class Project(Base):
    """
    기능 토글(feature toggle)을 묶는 작업 공간을 나타냅니다.
    id는 사용자가 지정하는 URL-friendly 문자열이며, 역할(Role)의 project 값과 같습니다.
    """
    __tablename__ = "projects"
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    def to_dict(self):
        return {"id": self.id, "name": self.name, "description": self.description}
