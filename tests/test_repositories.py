import pytest

from app.repositories.maintenance import MaintenanceActivityRepository, MaintenanceRequestRepository
from app.repositories.property import PropertyRepository


async def test_reads_are_scoped_to_the_workspace(session):
    mine = PropertyRepository(session, "ws-a")
    theirs = PropertyRepository(session, "ws-b")

    prop = await mine.create(name="Maple Court")

    assert (await mine.get_by_id(prop.id)).workspace_id == "ws-a"
    assert await theirs.get_by_id(prop.id) is None
    assert await theirs.search("maple") == []


async def test_soft_deleted_rows_are_hidden(session):
    repo = PropertyRepository(session, "ws-a")
    prop = await repo.create(name="Maple Court")

    assert await repo.soft_delete(prop.id) is True
    assert await repo.get_by_id(prop.id) is None
    assert await repo.search("maple") == []
    items, total = await repo.list()
    assert (items, total) == ([], 0)


async def test_soft_delete_requires_deleted_at(session):
    with pytest.raises(TypeError):
        await MaintenanceActivityRepository(session, "ws-a").soft_delete("anything")


async def test_ticket_numbers_are_per_workspace(session):
    a = MaintenanceRequestRepository(session, "ws-a")
    b = MaintenanceRequestRepository(session, "ws-b")

    first = await a.create(issue_description="Leak")
    second = await a.create(issue_description="Leak again")
    other = await b.create(issue_description="Elsewhere")

    assert (first.ticket_number, second.ticket_number, other.ticket_number) == (1, 2, 1)


async def test_first_where_matches_null(session):
    repo = PropertyRepository(session, "ws-a")
    await repo.create(name="No Address")
    await repo.create(name="Has Address", address="1 Main St")

    found = await repo.first_where(address=None)
    assert found.name == "No Address"
