from sqlalchemy import Column, Integer, String, JSON, DateTime, func
from ..database import Base


class Event(Base):
    """프로젝트 생성/수정/삭제 등 도메인 이벤트를 기록하는 추가 전용(append-only) 로그입니다."""
    __tablename__ = "events"
    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False)
    created_by = Column(String)
    data = Column(JSON)
    created_at = Column(DateTime, server_default=func.now())
