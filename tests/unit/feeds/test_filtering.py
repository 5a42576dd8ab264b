"""Tests for episode search, filters, sorting and pagination."""

from podplay.feeds.filtering import EpisodeQuery, extract_keywords, paginate, total_pages


def never_played(episode_id: str) -> bool:
    return False


class TestExtractKeywords:
    """Tests for extract_keywords."""

    def test_finds_keywords_case_insensitively(self, episode_factory) -> None:
        episodes = [
            episode_factory(1, title="Scaling python services", description="On aws"),
            episode_factory(2, title="Zero trust", description="<p>Security talk</p>"),
        ]

        assert extract_keywords(episodes) == ["AWS", "Python", "Security"]

    def test_no_matches(self, episode_factory) -> None:
        assert extract_keywords([episode_factory(1, title="Hello", description="")]) == []


class TestEpisodeQuery:
    """Tests for EpisodeQuery."""

    def test_search_matches_title_and_description(self, episode_factory) -> None:
        episodes = [
            episode_factory(1, title="Kubernetes basics"),
            episode_factory(2, description="We talk KUBERNETES"),
            episode_factory(3, title="Other"),
        ]

        result = EpisodeQuery(search="kubernetes").apply(episodes, never_played)

        assert [e.id for e in result] == ["ep-2", "ep-1"]

    def test_all_keywords_must_match(self, episode_factory) -> None:
        episodes = [
            episode_factory(1, title="AI on Azure"),
            episode_factory(2, title="AI on AWS"),
        ]

        result = EpisodeQuery(keywords=["AI", "Azure"]).apply(episodes, never_played)

        assert [e.id for e in result] == ["ep-1"]

    def test_played_hidden_unless_requested(self, episodes) -> None:
        played = {"ep-24", "ep-23"}.__contains__

        hidden = EpisodeQuery().apply(episodes, played)
        shown = EpisodeQuery(show_played=True).apply(episodes, played)

        assert len(hidden) == 23
        assert "ep-24" not in [e.id for e in hidden]
        assert len(shown) == 25

    def test_sort_orders(self, episodes, episode_factory) -> None:
        undated = episode_factory(30)
        pool = [episodes[3], undated, episodes[10], episodes[0]]

        newest = EpisodeQuery(sort="date-desc").apply(pool, never_played)
        oldest = EpisodeQuery(sort="date-asc").apply(pool, never_played)

        assert [e.id for e in newest] == ["ep-10", "ep-3", "ep-0", "ep-30"]
        assert [e.id for e in oldest] == ["ep-30", "ep-0", "ep-3", "ep-10"]

    def test_toggle_keyword(self) -> None:
        query = EpisodeQuery()

        query.toggle_keyword("AI")
        assert query.keywords == ["AI"]

        query.toggle_keyword("AI")
        assert query.keywords == []


class TestPagination:
    """Tests for total_pages and paginate."""

    def test_total_pages(self) -> None:
        assert total_pages(0, 10) == 0
        assert total_pages(10, 10) == 1
        assert total_pages(25, 10) == 3

    def test_paginate(self, episodes) -> None:
        assert [e.id for e in paginate(episodes, 1, 10)][0] == "ep-0"
        assert [e.id for e in paginate(episodes, 3, 10)] == [f"ep-{i}" for i in range(20, 25)]
        assert paginate(episodes, 4, 10) == []
