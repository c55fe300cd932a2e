from sqlmodel import SQLModel, Field
from typing import Optional

class Tenant(SQLModel, table=True):
    __tablename__ = "tenants"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    tenant_id: int = Field(foreign_key="tenants.id")
    role: str = Field(default="admin")  # admin, member
