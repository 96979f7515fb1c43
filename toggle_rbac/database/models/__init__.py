from .role import Role, ROOT_ROLE_TYPE, PROJECT_ADMIN_ROLE_TYPE, PROJECT_REGULAR_ROLE_TYPE, CUSTOM_ROLE_TYPE
from .role_user import RoleUser
from .role_permission import RolePermission
from .user import User
from .project import Project
from .feature import Feature
from .event import Event
