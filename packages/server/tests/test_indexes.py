"""
Index maintenance.
"""

import pytest

from b2boost_server.services.indexes import drop_index, ensure_user_indexes

from conftest import make_user


@pytest.fixture
async def legacy_indexes(db):
    await db["users"].insert_one(make_user())
    await db["users"].create_index("email", unique=True)
    await db["users"].create_index("kindeId", unique=True)
    await db["users"].create_index("id")
    return db


@pytest.mark.asyncio
async def test_drop_present_index(legacy_indexes):
    result = await drop_index(legacy_indexes, "users", "id_1")

    assert result.dropped is True
    assert result.error is None
    assert "id_1" in result.before
    assert "id_1" not in result.after
    assert set(result.after) == set(result.before) - {"id_1"}


@pytest.mark.asyncio
async def test_drop_missing_index_reports_failure(legacy_indexes):
    result = await drop_index(legacy_indexes, "users", "nope_1")

    assert result.dropped is False
    assert result.error
    assert result.after == result.before


@pytest.mark.asyncio
async def test_ensure_user_indexes(legacy_indexes):
    result = await ensure_user_indexes(legacy_indexes)

    assert [drop.name for drop in result.drops] == ["email_1", "kindeId_1"]
    assert all(drop.dropped for drop in result.drops)
    assert result.created == ["email_1_organizationId_1", "kindeId_1_organizationId_1"]
    assert "email_1" not in result.after
    assert "kindeId_1" not in result.after
    assert "email_1_organizationId_1" in result.after
    assert not result.after["email_1_organizationId_1"].get("unique", False)


@pytest.mark.asyncio
async def test_ensure_user_indexes_when_legacy_already_gone(db):
    await db["users"].insert_one(make_user())

    result = await ensure_user_indexes(db, unique=True)

    assert not any(drop.dropped for drop in result.drops)
    assert result.after["kindeId_1_organizationId_1"]["unique"] is True


@pytest.mark.asyncio
async def test_same_email_in_two_orgs_after_update(legacy_indexes):
    await ensure_user_indexes(legacy_indexes, unique=True)
    await legacy_indexes["users"].insert_one(
        make_user(kindeId="kp_other", organizationId="org-2")
    )
    assert await legacy_indexes["users"].count_documents({"email": "user@b2boost.io"}) == 2
