import asyncio

from notehub.core.db import create_engine, create_schema, create_sessionmaker
from notehub.db.models import Collaborator, Notebook, Page, User
from notehub.db.repositories.access_repository import AccessRepository
from notehub.domains.access.entities import LookupStatus, Role, Visibility


def _run_with_session(settings, fn, schema=True):
    async def runner():
        engine = create_engine(settings)
        try:
            if schema:
                await create_schema(engine)
            async with create_sessionmaker(engine)() as session:
                return await fn(session)
        finally:
            await engine.dispose()

    return asyncio.run(runner())


async def _seed(session):
    alice = User(name="Alice", email="alice@example.com", password_hash="x")
    bob = User(name="Bob", email="bob@example.com", password_hash="x")
    session.add_all([alice, bob])
    await session.flush()

    notebook = Notebook(title="Calculus", course_name="MATH101", visibility=Visibility.PRIVATE, owner_id=alice.id)
    session.add(notebook)
    await session.flush()

    page = Page(notebook_id=notebook.id, content="Limits")
    session.add_all([
        page,
        Collaborator(notebook_id=notebook.id, user_id=bob.id, role=Role.VIEWER),
        Collaborator(notebook_id=notebook.id, user_id=bob.id, role=Role.VIEWER),
    ])
    await session.commit()
    return alice.id, bob.id, notebook.id, page.id


def test_access_facts_in_one_read(settings):
    async def scenario(session):
        alice_id, bob_id, notebook_id, page_id = await _seed(session)
        repo = AccessRepository(session)
        return (
            alice_id, bob_id, notebook_id, page_id,
            await repo.get_access_facts(notebook_id, bob_id),
            await repo.get_access_facts(notebook_id, None),
            await repo.get_page_notebook_id(page_id),
        )

    alice_id, bob_id, notebook_id, page_id, for_bob, for_guest, page_parent = _run_with_session(settings, scenario)

    assert for_bob.is_found
    assert for_bob.value.owner_id == alice_id
    assert for_bob.value.visibility is Visibility.PRIVATE
    assert for_bob.value.roles == frozenset({Role.VIEWER})

    assert for_guest.value.roles == frozenset()
    assert page_parent.value == notebook_id


def test_absent_rows_are_missing(settings):
    async def scenario(session):
        repo = AccessRepository(session)
        return [
            await repo.get_access_facts(999, 1),
            await repo.get_page_notebook_id(999),
            await repo.get_question_page_id(999),
            await repo.get_answer_question_id(999),
            await repo.get_message_notebook_id(999),
        ]

    for lookup in _run_with_session(settings, scenario):
        assert lookup.status is LookupStatus.MISSING


def test_storage_errors_are_failed_not_missing(settings):
    # no schema: every read errors out in the driver
    async def scenario(session):
        repo = AccessRepository(session)
        return [
            await repo.get_access_facts(1, 1),
            await repo.get_page_notebook_id(1),
            await repo.get_message_notebook_id(1),
        ]

    for lookup in _run_with_session(settings, scenario, schema=False):
        assert lookup.status is LookupStatus.FAILED
        assert lookup.error
