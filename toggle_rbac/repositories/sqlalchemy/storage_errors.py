import functools

from sqlalchemy.exc import SQLAlchemyError

from toggle_rbac.services.exceptions import StorageError


def storage_operation(func):
    """
    리포지토리 메서드에서 발생한 SQLAlchemyError를 롤백 후 StorageError로 변환합니다.
    원래 예외는 __cause__로 보존됩니다.
    """
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"{type(self).__name__}.{func.__name__} failed: {e}") from e
    return wrapper
