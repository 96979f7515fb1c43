from sqlalchemy import Column, Integer, String, Text, DateTime, func
from sqlalchemy.orm import relationship
from ..database import Base

ROOT_ROLE_TYPE = "root"
PROJECT_ADMIN_ROLE_TYPE = "project-admin"
PROJECT_REGULAR_ROLE_TYPE = "project-regular"
CUSTOM_ROLE_TYPE = "custom"


class Role(Base):
    """
    권한(Permission) 부여의 묶음인 역할을 정의합니다.
    project가 비어 있으면 인스턴스 전체에 적용되는 루트 역할이고,
    project가 지정되면 해당 프로젝트 안에서만 적용됩니다.
    이름은 전역적으로 유일하지 않으므로 항상 id로 식별해야 합니다.
    """
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    type = Column(String, nullable=False, default=CUSTOM_ROLE_TYPE, server_default=CUSTOM_ROLE_TYPE)
    project = Column(Text, index=True)
    created_at = Column(DateTime, server_default=func.now())

    user_associations = relationship("RoleUser", back_populates="role", cascade="all, delete-orphan")
    permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "project": self.project,
        }
