from fastapi import APIRouter, Depends
from txscope.database.manager import DatabaseManager
from txscope.uow.aio import AsyncUnitOfWork
from txscope.response import ResponseModel
from ..service import IdentityService
from pydantic import BaseModel, Field

router = APIRouter()

class RegisterSchema(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    tenant_name: str = Field(min_length=1, max_length=128)

def get_uow() -> AsyncUnitOfWork:
    """Dependency: Unit of Work over the application's async session supplier."""
    manager = DatabaseManager.get_instance()
    return AsyncUnitOfWork(manager.sql.supplier())

def get_identity_service(uow: AsyncUnitOfWork = Depends(get_uow)) -> IdentityService:
    """Dependency: create IdentityService."""
    return IdentityService(uow)

@router.post("/register")
async def register(
    data: RegisterSchema,
    service: IdentityService = Depends(get_identity_service)
):
    """Register new tenant and its admin."""
    user = await service.register_tenant_admin(data.username, data.tenant_name)
    return ResponseModel.success(
        data={"id": user.id, "username": user.username, "tenant_id": user.tenant_id}
    )

@router.get("/tenants/{tenant_name}")
async def get_tenant(
    tenant_name: str,
    service: IdentityService = Depends(get_identity_service)
):
    """Get a tenant with its users."""
    tenant = await service.get_tenant_with_users(tenant_name)
    return ResponseModel.success(data=tenant)
