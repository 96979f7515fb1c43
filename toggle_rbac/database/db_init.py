import logging

from sqlalchemy.orm import Session

from toggle_rbac import permissions as p
from .database import engine, SessionLocal, Base
from .models import *

logger = logging.getLogger(__name__)

# Regular 루트 역할이 받는 권한. 빈 문자열 project는 "프로젝트 제한 없음"입니다.
REGULAR_ROOT_PERMISSIONS = [
    p.CREATE_STRATEGY,
    p.UPDATE_STRATEGY,
    p.DELETE_STRATEGY,
    p.UPDATE_APPLICATION,
    p.CREATE_CONTEXT_FIELD,
    p.UPDATE_CONTEXT_FIELD,
    p.DELETE_CONTEXT_FIELD,
    p.CREATE_PROJECT,
    p.CREATE_ADDON,
    p.UPDATE_ADDON,
    p.DELETE_ADDON,
]
REGULAR_DEFAULT_PROJECT_PERMISSIONS = p.PROJECT_ADMIN


def seed_root_roles(db: Session):
    """
    세 개의 루트 역할(Admin, Regular, Read)과 그 권한을 생성합니다.

    Returns:
        생성된 Admin 루트 역할.
    """
    admin_role = Role(name='Admin', description='Admin the instance', type=ROOT_ROLE_TYPE)
    regular_role = Role(name='Regular', description='Regular contributor. Can modify all root resources.', type=ROOT_ROLE_TYPE)
    read_role = Role(name='Read', description='A Read only user.', type=ROOT_ROLE_TYPE)
    db.add_all([admin_role, regular_role, read_role])

    # 변경사항을 반영하여 각 역할의 id를 할당받습니다.
    db.flush()

    db.add(RolePermission(role_id=admin_role.id, permission=p.ADMIN))
    db.add_all([
        RolePermission(role_id=regular_role.id, project='', permission=permission)
        for permission in REGULAR_ROOT_PERMISSIONS
    ])
    db.add_all([
        RolePermission(role_id=regular_role.id, project='default', permission=permission)
        for permission in REGULAR_DEFAULT_PROJECT_PERMISSIONS
    ])
    return admin_role


def initialize_db(bind=None, session_factory=None):
    """
    DB와 테이블을 생성하고, 기본 데이터(루트 역할, default 프로젝트, admin 사용자)를 삽입합니다.
    이미 역할이 존재하면 기본 데이터 삽입을 건너뜁니다.
    """
    logger.info("Initializing database...")

    # 모든 테이블을 생성합니다. (이미 존재하면 생성하지 않음)
    Base.metadata.create_all(bind=bind or engine)

    db = (session_factory or SessionLocal)()
    try:
        if db.query(Role).first():
            logger.info("Seed data already exists, skipping.")
            return

        admin_role = seed_root_roles(db)

        if not db.query(Project).filter(Project.id == 'default').first():
            db.add(Project(id='default', name='Default', description='Default project'))

        admin_user = User(username='admin', name='Administrator')
        db.add(admin_user)
        db.flush()

        db.add(RoleUser(user_id=admin_user.id, role_id=admin_role.id))

        db.commit()
        logger.info("Database initialized with root roles and admin user.")

    except Exception:
        logger.exception("Database initialization failed, rolling back.")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    initialize_db()
