from typing import Any, Dict
from sqlalchemy.exc import IntegrityError
from txscope.exceptions.errors import CommitFailed
from txscope.exceptions.handler import BusinessException
from txscope.logging.logger import get_logger
from txscope.uow.aio import AsyncUnitOfWork
from .models import Tenant, User
from .repository import TenantRepository, UserRepository

logger = get_logger("identity_service")

_USERNAME_CONFLICT_MARKERS = (
    "username",
    "users.username",
    "users_username",
)

class IdentityService:
    def __init__(self, uow: AsyncUnitOfWork):
        """Initialize Identity Service with the Unit of Work it opens scopes from."""
        self.uow = uow

    async def register_tenant_admin(self, username: str, tenant_name: str) -> User:
        """Register a new tenant and its admin in one transaction."""
        try:
            async with self.uow.transaction() as scope:
                tenant_repo = scope.get_repository(TenantRepository)
                user_repo = scope.get_repository(UserRepository)

                if await tenant_repo.get_by_name(tenant_name):
                    raise BusinessException("Tenant/org name already registered", code=400)

                new_tenant = await tenant_repo.create(Tenant(name=tenant_name))
                # Need the generated tenant id for the admin row
                await scope.flush()
                new_user = await user_repo.create(
                    User(username=username, tenant_id=new_tenant.id, role="admin")
                )
        except (CommitFailed, IntegrityError) as e:
            cause = e.__cause__ if isinstance(e, CommitFailed) else e
            error_msg = str(getattr(cause, "orig", cause)).lower()
            if isinstance(cause, IntegrityError) and any(m in error_msg for m in _USERNAME_CONFLICT_MARKERS):
                logger.warning(f"Username {username} already exists")
                raise BusinessException("Username already exists", status_code=200, code=4001) from e
            logger.error(f"Failed to register tenant {tenant_name}: {error_msg}")
            raise BusinessException("Registration failed: data conflict", code=400) from e

        logger.info(f"Tenant {tenant_name} created with admin {username}")
        return new_user

    async def get_tenant_with_users(self, tenant_name: str) -> Dict[str, Any]:
        """Return a tenant and its users."""
        async with self.uow.transaction() as scope:
            tenant = await scope.get_repository(TenantRepository).get_by_name(tenant_name)
            if tenant is None:
                raise BusinessException(f"Tenant {tenant_name} not found", code=404)
            users = await scope.get_repository(UserRepository).get_by_tenant_id(tenant.id)
            return {
                "id": tenant.id,
                "name": tenant.name,
                "users": [
                    {"id": u.id, "username": u.username, "role": u.role} for u in users
                ],
            }
