from .sqlalchemy_access_repository import SqlalchemyAccessRepository
from .sqlalchemy_user_repository import SqlalchemyUserRepository
from .sqlalchemy_project_repository import SqlalchemyProjectRepository
from .sqlalchemy_feature_repository import SqlalchemyFeatureToggleRepository
from .sqlalchemy_event_repository import SqlalchemyEventRepository
