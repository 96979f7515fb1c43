from sqlalchemy import Column, String, Boolean, DateTime, func
from ..database import Base


class Feature(Base):
    """기능 토글. 권한 검사 시 토글이 속한 프로젝트를 찾는 데 사용됩니다."""
    __tablename__ = "features"
    name = Column(String, primary_key=True)
    project = Column(String, nullable=False, default="default", server_default="default", index=True)
    archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
