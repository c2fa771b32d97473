"""Tests for stop word and stacking marker cleaning."""

import pytest

from tvrenamer.cleaner import (
    clean_folder_stacking_markers,
    clean_stacking_markers,
    get_folder_stacking_marker,
    get_stacking_marker,
    get_stacking_number,
    remove_stopwords,
)


class TestRemoveStopwords:
    """Tests for remove_stopwords function."""

    def test_release_tags(self) -> None:
        assert remove_stopwords("Show.S01E02.720p.x264.mkv") == "Show.S01E02 .mkv"

    def test_needs_delimiter(self) -> None:
        """Words glued to other text stay."""
        assert remove_stopwords("Matrix264.mkv") == "Matrix264.mkv"

    def test_bad_words(self) -> None:
        assert remove_stopwords("Show.S01E01.GROUP.mkv", ["group"]) == "Show.S01E01 .mkv"

    def test_without_extension(self) -> None:
        assert remove_stopwords("Show 720p") == "Show "


class TestStacking:
    """Tests for the stacking marker helpers."""

    @pytest.mark.parametrize("filename,marker,number", [
        ("movie.cd1.avi", "cd1", 1),
        ("movie-part2.mkv", "part2", 2),
        ("movie-b.avi", "b", 2),
        ("movie 2of2.avi", "2of2", 2),
        ("disc1.iso", "disc1", 1),
        ("Show.S01E01.avi", "", 0),
    ])
    def test_marker_and_number(self, filename: str, marker: str, number: int) -> None:
        assert get_stacking_marker(filename) == marker
        assert get_stacking_number(filename) == number

    def test_clean(self) -> None:
        assert clean_stacking_markers("movie.cd1.avi") == "movie.avi"
        assert clean_stacking_markers("movie-b.avi") == "movie.avi"
        assert clean_stacking_markers("Show.S01E01.avi") == "Show.S01E01.avi"
        assert clean_stacking_markers("") == ""

    def test_folder(self) -> None:
        assert get_folder_stacking_marker("Movie CD2") == "CD2"
        assert clean_folder_stacking_markers("Movie CD2") == "Movie"
        assert get_folder_stacking_marker("Season 1") == ""
        assert clean_folder_stacking_markers("Season 1") == "Season 1"
