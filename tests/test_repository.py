"""Repositories reach the session only through their scope."""
import pytest

from apps.identity.models import Tenant, User
from apps.identity.repository import TenantRepository, UserRepository
from txscope.exceptions.errors import ScopeClosed
from txscope.repository import IRepository, ISyncRepository, SyncRepository


class SyncTenantRepository(SyncRepository[Tenant]):

    def __init__(self, scope):
        super().__init__(scope, Tenant)


class TestAsyncRepository:

    async def test_crud_within_one_scope(self, async_uow):
        async with async_uow.transaction() as scope:
            tenants = scope.get_repository(TenantRepository)
            users = scope.get_repository(UserRepository)

            acme = await tenants.create(Tenant(name="acme"))
            await scope.flush()
            await users.create(User(username="alice", tenant_id=acme.id))
            await users.create(User(username="bob", tenant_id=acme.id, role="member"))

        async with async_uow.transaction() as scope:
            users = scope.get_repository(UserRepository)
            acme = await scope.get_repository(TenantRepository).get_by_name("acme")

            assert acme is not None
            assert await users.count(tenant_id=acme.id) == 2
            assert (await users.get_by_username("bob")).role == "member"
            assert {u.username for u in await users.get_by_tenant_id(acme.id)} == {"alice", "bob"}
            assert len(await users.get_all(limit=1)) == 1

            bob = await users.get_by_username("bob")
            bob.role = "admin"
            await users.update(bob)

        async with async_uow.transaction() as scope:
            users = scope.get_repository(UserRepository)
            bob = await users.get_by_username("bob")
            assert bob.role == "admin"
            assert await users.delete(bob.id) is True
            assert await users.delete(9999) is False

        async with async_uow.transaction() as scope:
            assert await scope.get_repository(UserRepository).get_by_username("bob") is None

    async def test_get_repository_is_cached_per_scope(self, async_uow):
        async with async_uow.transaction() as first:
            repo = first.get_repository(TenantRepository)
            assert first.get_repository(TenantRepository) is repo

        async with async_uow.transaction() as second:
            assert second.get_repository(TenantRepository) is not repo

    async def test_repository_used_after_scope_exit_is_rejected(self, async_uow):
        async with async_uow.transaction() as scope:
            tenants = scope.get_repository(TenantRepository)

        with pytest.raises(ScopeClosed):
            await tenants.get_by_name("acme")
        with pytest.raises(ScopeClosed):
            scope.get_repository(UserRepository)


class TestSyncRepository:

    def test_crud_within_one_scope(self, sync_uow):
        with sync_uow.transaction() as scope:
            tenants = scope.get_repository(SyncTenantRepository)
            tenants.create(Tenant(name="acme"))
            tenants.create(Tenant(name="globex"))

        with sync_uow.transaction() as scope:
            tenants = scope.get_repository(SyncTenantRepository)
            assert tenants.count() == 2
            globex = tenants.find_one(name="globex")
            assert globex is not None
            assert tenants.get_by_id(globex.id).name == "globex"
            assert [t.name for t in tenants.find_all(name="acme")] == ["acme"]
            assert tenants.delete(globex.id) is True

        with sync_uow.transaction() as scope:
            assert [t.name for t in scope.get_repository(SyncTenantRepository).get_all()] == ["acme"]

    def test_repository_used_after_scope_exit_is_rejected(self, sync_uow):
        with sync_uow.transaction() as scope:
            tenants = scope.get_repository(SyncTenantRepository)

        with pytest.raises(ScopeClosed):
            tenants.count()

    def test_sync_repository_implements_the_crud_interface(self):
        assert issubclass(SyncRepository, ISyncRepository)
        assert ISyncRepository.__abstractmethods__ == IRepository.__abstractmethods__
