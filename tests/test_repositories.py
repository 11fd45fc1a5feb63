import pytest

from booknotion.core.errors import ConflictError
from booknotion.core.security import CredentialStore
from booknotion.db.repositories import NotebookRepository, SectionRepository, UserRepository
from booknotion.db.repositories.notebook_repository import like_pattern
from booknotion.domains.identity.entities import User


@pytest.fixture
def credentials():
    return CredentialStore(secret="repo-secret", bcrypt_rounds=4)


async def make_user(session, credentials, username="dora", email="dora@example.com"):
    user = User.create_user(username, email, "secret1", credentials)
    return await UserRepository(session).create(user)


async def test_user_create_and_lookup(session, credentials):
    repository = UserRepository(session)
    created = await make_user(session, credentials)

    assert created.id is not None
    assert await repository.get_by_email("dora@example.com") == created
    assert await repository.get_by_username("dora") == created
    assert await repository.email_exists("dora@example.com")
    assert not await repository.username_exists("nobody")
    assert created.authenticate("secret1", credentials)


async def test_user_unique_violation_is_conflict(session, credentials):
    await make_user(session, credentials)

    with pytest.raises(ConflictError):
        await make_user(session, credentials, username="dora2")


async def test_section_delete_reports_counts(session, credentials):
    user = await make_user(session, credentials)
    sections = SectionRepository(session)
    notebooks = NotebookRepository(session)

    section = await sections.create("Work", user.id)
    for name in ("a", "b"):
        await notebooks.create(name, section.id, "", user.id)

    assert await sections.count_notebooks(section.id, user.id) == 2
    assert await sections.delete(section.id, user.id) == (1, 2)
    assert await sections.get_by_id(section.id, user.id) is None
    assert await notebooks.get_by_section(section.id, user.id) == []
    assert await sections.delete(section.id, user.id) == (0, 0)


async def test_writes_for_foreign_user_affect_no_rows(session, credentials):
    owner = await make_user(session, credentials)
    stranger = await make_user(session, credentials, username="eve", email="eve@example.com")
    sections = SectionRepository(session)
    notebooks = NotebookRepository(session)

    section = await sections.create("Work", owner.id)
    notebook = await notebooks.create("Todo", section.id, "x", owner.id)

    assert await sections.update(section.id, "Stolen", stranger.id) == 0
    assert await notebooks.update(notebook.id, "Stolen", "y", section.id, stranger.id) == 0
    assert await notebooks.update_content(notebook.id, "y", stranger.id) == 0
    assert await notebooks.delete(notebook.id, stranger.id) == 0
    assert await notebooks.get_by_user(stranger.id) == []


async def test_update_content_keeps_name_and_section(session, credentials):
    user = await make_user(session, credentials)
    section = await SectionRepository(session).create("Work", user.id)
    notebooks = NotebookRepository(session)
    notebook = await notebooks.create("Todo", section.id, "old", user.id)

    assert await notebooks.update_content(notebook.id, "new", user.id) == 1

    session.expire_all()
    updated = await notebooks.get_by_id(notebook.id, user.id)
    assert updated.content == "new"
    assert updated.name == "Todo"
    assert updated.section_id == section.id
    assert updated.updated_at >= notebook.updated_at


async def test_search_is_case_insensitive(session, credentials):
    user = await make_user(session, credentials)
    section = await SectionRepository(session).create("Work", user.id)
    notebooks = NotebookRepository(session)
    match = await notebooks.create("Meeting NOTES", section.id, "", user.id)
    await notebooks.create("Other", section.id, "nothing here", user.id)

    found = await notebooks.search("notes", user.id)

    assert [n.id for n in found] == [match.id]


@pytest.mark.parametrize(
    "query, pattern",
    [
        ("abc", "%abc%"),
        ("50%", "%50\\%%"),
        ("a_b", "%a\\_b%"),
        ("c:\\dir", "%c:\\\\dir%"),
    ],
)
def test_like_pattern_escapes_wildcards(query, pattern):
    assert like_pattern(query) == pattern
