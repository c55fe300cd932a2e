"""
Model registration: import every table model here so SQLModel.metadata knows them
(create_all in tests and scripts relies on it).
"""
from apps.identity.models import Tenant, User

__all__ = ["Tenant", "User"]
