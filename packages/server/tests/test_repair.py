"""
Repair operations on user records.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from b2boost_server.models.user import User
from b2boost_server.services.repair import relink_identity, rename_role, repair_user

from conftest import TEST_ORG, make_user

OLD = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestRenameRole:
    @pytest.mark.asyncio
    async def test_sales_rep_becomes_customer(self, db):
        await db["users"].insert_many([
            make_user(email="rep1@b2boost.io", role="sales_rep"),
            make_user(email="rep2@b2boost.io", role="sales_rep", organizationId="org-2"),
            make_user(email="boss@b2boost.io", role="owner"),
        ])

        result = await rename_role(db, "sales_rep", "customer")

        assert result.matched_before == 2
        assert result.modified == 2
        assert await db["users"].count_documents({"role": "sales_rep"}) == 0
        for email in ("rep1@b2boost.io", "rep2@b2boost.io"):
            doc = await db["users"].find_one({"email": email})
            assert doc["role"] == "customer"
        boss = await db["users"].find_one({"email": "boss@b2boost.io"})
        assert boss["role"] == "owner"

    @pytest.mark.asyncio
    async def test_nothing_to_rename(self, db):
        await db["users"].insert_one(make_user(role="customer"))
        result = await rename_role(db, "sales_rep", "customer")
        assert result.matched_before == 0
        assert result.modified == 0

    @pytest.mark.asyncio
    async def test_same_role_rejected(self, db):
        with pytest.raises(ValueError):
            await rename_role(db, "customer", "customer")


class TestRepairUser:
    @pytest.mark.asyncio
    async def test_restores_access(self, db):
        await db["users"].insert_one(make_user(
            email="owner@b2boost.io",
            role="customer",
            isActive=False,
            status="pending",
            createdAt=OLD,
            updatedAt=OLD,
        ))

        user = await repair_user(db, "owner@b2boost.io", TEST_ORG)

        assert user is not None
        assert user.role == "owner"
        assert user.is_active is True
        assert user.status == "active"
        assert user.updated_at > OLD

        stored = User.from_document(await db["users"].find_one({"email": "owner@b2boost.io"}))
        assert stored.role == "owner"
        assert stored.is_active is True
        assert stored.updated_at > OLD

    @pytest.mark.asyncio
    async def test_only_matching_org(self, db):
        await db["users"].insert_many([
            make_user(email="multi@b2boost.io", organizationId=TEST_ORG),
            make_user(email="multi@b2boost.io", organizationId="org-2"),
        ])
        await repair_user(db, "multi@b2boost.io", "org-2", role="admin")

        untouched = await db["users"].find_one({"organizationId": TEST_ORG})
        assert untouched["role"] == "customer"

    @pytest.mark.asyncio
    async def test_not_found_modifies_nothing(self, db):
        await db["users"].insert_one(make_user(email="someone@b2boost.io"))
        before = await db["users"].find({}).to_list(length=None)

        assert await repair_user(db, "ghost@b2boost.io", TEST_ORG) is None
        assert await db["users"].find({}).to_list(length=None) == before


class TestRelinkIdentity:
    @pytest.mark.asyncio
    async def test_relinks(self, db):
        await db["users"].insert_one(make_user(email="owner@b2boost.io", kindeId="manual-123"))

        relink = await relink_identity(db, "owner@b2boost.io", " kp_real ")

        assert relink.previous_kinde_id == "manual-123"
        assert relink.user.kinde_id == "kp_real"
        stored = await db["users"].find_one({"email": "owner@b2boost.io"})
        assert stored["kindeId"] == "kp_real"

    @pytest.mark.asyncio
    async def test_scoped_to_org(self, db):
        await db["users"].insert_many([
            make_user(email="multi@b2boost.io", kindeId="kp_a", organizationId=TEST_ORG),
            make_user(email="multi@b2boost.io", kindeId="kp_b", organizationId="org-2"),
        ])
        relink = await relink_identity(db, "multi@b2boost.io", "kp_new", organization_id="org-2")

        assert relink.previous_kinde_id == "kp_b"
        assert (await db["users"].find_one({"organizationId": TEST_ORG}))["kindeId"] == "kp_a"

    @pytest.mark.asyncio
    async def test_not_found(self, db):
        assert await relink_identity(db, "ghost@b2boost.io", "kp_x") is None
        assert await db["users"].count_documents({}) == 0
