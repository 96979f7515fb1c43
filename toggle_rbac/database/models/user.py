from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from ..database import Base


class User(Base):
    """
    시스템의 사용자를 나타냅니다.
    역할 할당(role_user)의 조인 키로 사용되며, 인증은 외부 계층이 담당합니다.
    """
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True)
    email = Column(String, unique=True)
    name = Column(String)
    image_url = Column(String)
    created_at = Column(DateTime, server_default=func.now())

    role_associations = relationship("RoleUser", back_populates="user", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "image_url": self.image_url,
        }
