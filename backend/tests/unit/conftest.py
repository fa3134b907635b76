"""Shared fixtures for unit tests.

Every test runs against an in-memory document: the remote store and the
email provider are mocks, so no unit test touches the network.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from yume.models import AppDocument, Episode, Media, MediaType, Role, Season, User
from yume.services.document_store import RemoteDocumentStore
from yume.services.email_service import VerificationMailer
from yume.services.state_sync import StateSynchronizer

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def make_user(user_id: int, username: str, role: Role = Role.USER, **kwargs) -> User:
    return User(
        id=user_id,
        username=username,
        email=f"{username.lower()}@example.com",
        password="secret1",
        role=role,
        **kwargs,
    )


@pytest.fixture
def admin() -> User:
    return make_user(1, "Admin", Role.ADMIN)


@pytest.fixture
def alice() -> User:
    return make_user(2, "Alice")


@pytest.fixture
def bob() -> User:
    return make_user(3, "Bob")


@pytest.fixture
def movie() -> Media:
    return Media(
        id=1,
        title="Spirited Away",
        release_year=2001,
        genre=["Animation", "Fantasy"],
        type=MediaType.MOVIE,
        audio_languages=["Japanese", "English"],
        subtitle_languages=["English"],
        source_url="https://cdn.example.com/spirited-away.mpd",
    )


@pytest.fixture
def show() -> Media:
    return Media(
        id=2,
        title="Mushishi",
        release_year=2005,
        genre=["Animation", "Mystery"],
        type=MediaType.TV_SHOW,
        audio_languages=["Japanese"],
        subtitle_languages=["English", "French"],
        seasons=[
            Season(
                season_number=1,
                episodes=[
                    Episode(episode_number=1, title="The Green Seat", source_url="https://cdn.example.com/m/1x1.mpd"),
                    Episode(episode_number=2, title="The Light of the Eyelid"),
                ],
            )
        ],
    )


@pytest.fixture
def document(admin, alice, bob, movie, show) -> AppDocument:
    """A small populated document."""
    return AppDocument(users=[admin, alice, bob], media=[movie, show])


@pytest.fixture
def mock_store(document):
    """A remote store holding ``document``."""
    store = MagicMock(spec=RemoteDocumentStore)
    store.fetch = AsyncMock(return_value=document.to_json())
    store.save = AsyncMock()
    return store


@pytest.fixture
def mock_mailer():
    mailer = MagicMock(spec=VerificationMailer)
    mailer.send_verification = AsyncMock(return_value=True)
    return mailer


@pytest.fixture
async def sync(mock_store):
    """A loaded synchronizer with a short debounce window."""
    synchronizer = StateSynchronizer(mock_store, debounce_seconds=0.01)
    await synchronizer.load()
    yield synchronizer
    await synchronizer.flush()
