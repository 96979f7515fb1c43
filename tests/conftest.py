# tests/conftest.py
import pytest
from pathlib import Path
from sqlalchemy.orm import sessionmaker

from toggle_rbac.database import Base, make_engine, models

# ===================================================================
#  공용 DB Fixture (테스트마다 새 SQLite 파일, 외래 키 활성화)
# ===================================================================

@pytest.fixture
def db_engine(tmp_path: Path):
    """테스트마다 독립된 SQLite 엔진을 생성하고 모든 테이블을 만듭니다."""
    engine = make_engine(f"sqlite:///{tmp_path / 'rbac_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def make_user(db_session):
    """사용자 행을 생성하는 헬퍼를 반환합니다."""
    def _make_user(username: str, email: str = None) -> models.User:
        user = models.User(username=username, email=email, name=username.capitalize())
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user
