from sqlalchemy import Column, Integer, Text, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from ..database import Base


class RolePermission(Base):
    """
    역할이 부여하는 권한(grant)입니다.
    project가 지정되면 해당 프로젝트로 제한되고, 비어 있거나 '*'이면 모든 프로젝트에 적용됩니다.
    """
    __tablename__ = "role_permission"
    # ORM 매핑용 대리 키. 저장소 밖으로 노출되지 않습니다.
    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    project = Column(Text)
    permission = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    role = relationship("Role", back_populates="permissions")
