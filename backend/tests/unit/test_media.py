"""Unit tests for catalog mutators and queries."""

import pytest

from tests.unit.conftest import NOW
from yume.core.errors import NotFoundError
from yume.models import Media, MediaType, Season
from yume.services import media as catalog
from yume.services.media import MediaDraft


class TestMediaMutators:
    """Test admin content management."""

    def test_add_media_assigns_next_id(self, document):
        doc = catalog.add_media(document, MediaDraft(title="Perfect Blue", type=MediaType.MOVIE))
        added = doc.media[-1]
        assert added.id == 3
        assert added.comments == [] and added.ratings == []

    def test_movie_drops_seasons_and_show_drops_source(self, document):
        seasons = [Season(season_number=1)]
        doc = catalog.add_media(
            document,
            MediaDraft(title="Movie", type=MediaType.MOVIE, source_url="s.mpd", seasons=seasons),
        )
        doc = catalog.add_media(
            doc,
            MediaDraft(title="Show", type=MediaType.TV_SHOW, source_url="s.mpd", seasons=seasons),
        )
        movie, show = doc.media[-2:]
        assert movie.seasons == [] and movie.source_url == "s.mpd"
        assert show.source_url is None and len(show.seasons) == 1

    def test_license_server_only_for_protected(self, document):
        doc = catalog.add_media(
            document, MediaDraft(title="Open", license_server_url="https://license.example.com")
        )
        assert doc.media[-1].license_server_url is None

    def test_update_keeps_comments_and_ratings(self, document, alice):
        doc = catalog.add_media_comment(document, 1, alice, "Lovely", now=NOW)
        doc = catalog.rate_media(doc, 1, 2, 5)
        doc = catalog.update_media(doc, 1, MediaDraft(title="Spirited Away (2001)"))
        updated = catalog.get_media(doc, 1)
        assert updated.title == "Spirited Away (2001)"
        assert len(updated.comments) == 1 and len(updated.ratings) == 1

    def test_delete_media(self, document):
        doc = catalog.delete_media(document, 1)
        assert [m.id for m in doc.media] == [2]
        with pytest.raises(NotFoundError):
            catalog.get_media(doc, 1)

    def test_draft_requires_title(self):
        with pytest.raises(ValueError):
            MediaDraft(title="")


class TestMediaComments:
    """Test flat media comments."""

    def test_comments_are_prepended_with_ids(self, document, alice, bob):
        doc = catalog.add_media_comment(document, 1, alice, "First", now=NOW)
        doc = catalog.add_media_comment(doc, 1, bob, "Second", now=NOW)
        comments = catalog.get_media(doc, 1).comments
        assert [(c.id, c.text) for c in comments] == [(2, "Second"), (1, "First")]
        assert [(c.author_id, c.username) for c in comments] == [(3, "Bob"), (2, "Alice")]

    def test_edit_and_delete(self, document, alice):
        doc = catalog.add_media_comment(document, 1, alice, "Frist", now=NOW)
        doc = catalog.edit_media_comment(doc, 1, 1, "First")
        assert catalog.get_media(doc, 1).comments[0].text == "First"
        doc = catalog.delete_media_comment(doc, 1, 1)
        assert catalog.get_media(doc, 1).comments == []
        with pytest.raises(NotFoundError):
            catalog.delete_media_comment(doc, 1, 1)

    def test_legacy_comments_without_ids_are_numbered(self):
        media = Media.model_validate(
            {
                "id": 1,
                "title": "Old",
                "comments": [
                    {"username": "a", "text": "x", "timestamp": "2023-01-01T00:00:00Z"},
                    {"id": 5, "username": "b", "text": "y", "timestamp": "2023-01-02T00:00:00Z"},
                    {"username": "c", "text": "z", "timestamp": "2023-01-03T00:00:00Z"},
                ],
            }
        )
        assert [c.id for c in media.comments] == [6, 5, 7]


class TestRatings:
    """Test star ratings."""

    def test_one_rating_per_user(self, document):
        doc = catalog.rate_media(document, 1, 2, 3)
        doc = catalog.rate_media(doc, 1, 2, 5)
        doc = catalog.rate_media(doc, 1, 3, 4)
        movie = catalog.get_media(doc, 1)
        assert len(movie.ratings) == 2
        assert catalog.user_rating(movie, 2) == 5
        assert catalog.average_rating(movie) == 4.5

    def test_unrated_average_is_zero(self, movie):
        assert catalog.average_rating(movie) == 0.0
        assert catalog.user_rating(movie, 2) is None

    def test_average_rounds_to_one_decimal(self, document):
        doc = document
        for user_id, stars in ((1, 5), (2, 4), (3, 4)):
            doc = catalog.rate_media(doc, 1, user_id, stars)
        assert catalog.average_rating(catalog.get_media(doc, 1)) == 4.3

    def test_rating_out_of_range(self, document):
        with pytest.raises(ValueError):
            catalog.rate_media(document, 1, 2, 6)


class TestQueries:
    """Test browse facets, filters and playback sources."""

    def test_facets(self, document):
        assert catalog.genres(document.media) == ["Animation", "Fantasy", "Mystery"]
        assert catalog.audio_languages(document.media) == ["English", "Japanese"]
        assert catalog.subtitle_languages(document.media) == ["English", "French"]
        assert catalog.release_years(document.media) == [2005, 2001]

    @pytest.mark.parametrize(
        "criteria,expected",
        [
            ({}, [1, 2]),
            ({"search": "SPIRIT"}, [1]),
            ({"genre": "Mystery"}, [2]),
            ({"year": 2001}, [1]),
            ({"audio_language": "English"}, [1]),
            ({"subtitle_language": "French"}, [2]),
            ({"media_type": MediaType.TV_SHOW}, [2]),
            ({"genre": "Animation", "year": 2005}, [2]),
            ({"genre": "Fantasy", "year": 2005}, []),
        ],
    )
    def test_filter_media(self, document, criteria, expected):
        assert [m.id for m in catalog.filter_media(document.media, **criteria)] == expected

    def test_playback_source(self, movie, show):
        assert catalog.playback_source(movie) == "https://cdn.example.com/spirited-away.mpd"
        assert catalog.playback_source(show, 1, 1) == "https://cdn.example.com/m/1x1.mpd"
        assert catalog.playback_source(show, 1, 2) is None  # no stream uploaded yet
        assert catalog.playback_source(show, 2, 1) is None
        assert catalog.playback_source(show) is None
