from sqlalchemy import Column, Integer, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from ..database import Base


class RoleUser(Base):
    """
    역할(Role)과 사용자(User)를 연결하는 연관 테이블 모델입니다.
    (role_id, user_id) 쌍은 유일하며, 역할이나 사용자가 삭제되면 함께 삭제됩니다.
    """
    __tablename__ = "role_user"
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, server_default=func.now())

    role = relationship("Role", back_populates="user_associations")
    user = relationship("User", back_populates="role_associations")
