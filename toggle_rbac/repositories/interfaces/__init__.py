from .access import IAccessRepository
from .user import IUserRepository
from .project import IProjectRepository
from .feature import IFeatureToggleRepository
from .event import IEventRepository
