from .rbac_middleware import rbac_middleware, RbacMiddleware, check_rbac, USER_KEY, CHECK_RBAC_KEY
