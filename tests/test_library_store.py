"""Tests for the in-memory library store."""

import logging

import pytest

from cds_gateway.libraries.models import LibraryDocument, compute_content_hash
from cds_gateway.libraries.store import LibraryStore

from tests.factories import library_json


def make_document(library_id: str, version: str | None, **body) -> LibraryDocument:
    document = LibraryDocument.from_json(library_json(library_id, version, **body))
    assert document is not None
    return document


class TestLibraryDocument:
    """Tests for building documents from JSON payloads."""

    def test_elm_identifier(self) -> None:
        """Test that the id and version are read from library.identifier."""
        document = make_document("Common", "1.0")

        assert document.id == "Common"
        assert document.version == "1.0.0"

    def test_bare_identifier(self) -> None:
        """Test that a top-level identifier is accepted."""
        document = LibraryDocument.from_json({"identifier": {"id": "X", "version": "2.0.0"}})

        assert document is not None
        assert document.key == ("X", "2.0.0")

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            [],
            "text",
            {"library": {"name": "no identifier"}},
            {"identifier": {"version": "1.0.0"}},
            {"identifier": {"id": "", "version": "1.0.0"}},
        ],
    )
    def test_payload_without_id_is_not_a_document(self, payload) -> None:
        """Test that payloads without an identifier id are not indexed."""
        assert LibraryDocument.from_json(payload) is None

    def test_content_hash_ignores_key_order(self) -> None:
        """Test that equal JSON values hash the same regardless of key order."""
        first = LibraryDocument.from_json({"identifier": {"id": "X", "version": "1.0.0"}, "a": 1, "b": 2})
        second = LibraryDocument.from_json({"b": 2, "a": 1, "identifier": {"version": "1.0.0", "id": "X"}})

        assert first.content_equals(second)

    def test_to_json_returns_independent_copy(self) -> None:
        """Test that changing an exported payload leaves the stored document intact."""
        document = make_document("X", "1.0.0", statements={"def": [{"name": "Rule"}]})
        store = LibraryStore([document])

        exported = store.resolve("X", "1.0.0").document.to_json()
        exported["library"]["statements"]["def"].append({"name": "Injected"})
        exported["library"]["identifier"]["version"] = "9.9.9"

        stored = store.resolve("X", "1.0.0").document
        assert stored.source["library"]["statements"]["def"] == [{"name": "Rule"}]
        assert stored.content_hash == compute_content_hash(stored.source)


class TestLibraryStoreAdd:
    """Tests for adding documents and duplicate detection."""

    def test_conflicting_duplicate_keeps_first(self, caplog) -> None:
        """Test that a second copy with different content is logged and discarded."""
        store = LibraryStore()
        first = make_document("X", "1.0.0", statements={"def": ["first"]})
        second = make_document("X", "1.0.0", statements={"def": ["second"]})

        with caplog.at_level(logging.WARNING):
            assert store.add(first) is True
            assert store.add(second) is False

        assert store.all() == [first]
        assert store.resolve("X", "1.0.0").document.source == first.source
        assert store.conflicts == [("X", "1.0.0")]
        warnings = [r for r in caplog.records if "Multiple copies of X:1.0.0" in r.getMessage()]
        assert len(warnings) == 1

    def test_identical_duplicate_is_not_a_conflict(self, caplog) -> None:
        """Test that an identical second copy is dropped without a warning."""
        store = LibraryStore()

        with caplog.at_level(logging.WARNING):
            store.add(make_document("X", "1.0.0"))
            store.add(make_document("X", "1.0.0"))

        assert len(store) == 1
        assert store.conflicts == []
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_equivalent_version_spellings_share_a_key(self) -> None:
        """Test that 1.0 and 1.0.0 are stored under the same version."""
        store = LibraryStore()
        store.add(make_document("X", "1.0"))
        store.add(make_document("X", "1.0.0"))

        assert store.versions("X") == ["1.0.0"]

    def test_add_json_ignores_payload_without_identifier(self) -> None:
        """Test that add_json skips payloads with no identifier."""
        store = LibraryStore()

        assert store.add_json({"not": "a library"}) is False
        assert store.add_json(library_json("X", "1.0.0")) is True
        assert len(store) == 1

    def test_all_returns_fresh_list(self) -> None:
        """Test that clearing the returned list does not affect the store."""
        store = LibraryStore([make_document("X", "1.0.0"), make_document("Y", "1.0.0")])

        documents = store.all()
        documents.clear()

        assert len(store.all()) == 2

    def test_all_has_one_entry_per_id_and_version(self) -> None:
        """Test that every id and version pair is listed once."""
        store = LibraryStore(
            [
                make_document("X", "1.0.0"),
                make_document("X", "2.0.0"),
                make_document("Y", "1.0.0"),
            ]
        )

        keys = {d.key for d in store.all()}
        assert keys == {("X", "1.0.0"), ("X", "2.0.0"), ("Y", "1.0.0")}
        assert set(store.ids()) == {"X", "Y"}
        assert "X" in store
        assert "Z" not in store


class TestLibraryStoreResolve:
    """Tests for exact and latest resolution."""

    @pytest.fixture
    def store(self) -> LibraryStore:
        return LibraryStore(
            [
                make_document("X", "1.0.0"),
                make_document("X", "1.2.0"),
                make_document("X", "2.0.0-beta"),
                make_document("Y", "0.9.0"),
            ]
        )

    def test_resolve_exact_version(self, store: LibraryStore) -> None:
        """Test that an exact version lookup returns that version."""
        result = store.resolve("X", "1.2.0")

        assert result.found
        assert result.document.version == "1.2.0"

    def test_resolve_normalizes_requested_version(self, store: LibraryStore) -> None:
        """Test that the requested version is normalized before lookup."""
        assert store.resolve("X", "1.2").document.version == "1.2.0"

    def test_resolve_latest_honours_semver_precedence(self, store: LibraryStore) -> None:
        """Test that a pre-release of a higher core beats lower releases."""
        assert store.resolve_latest("X").document.version == "2.0.0-beta"

    def test_release_wins_over_prerelease_of_same_core(self, store: LibraryStore) -> None:
        """Test that a release outranks its own pre-release."""
        store.add(make_document("X", "2.0.0"))

        assert store.resolve_latest("X").document.version == "2.0.0"

    @pytest.mark.parametrize("library_id", ["X", "Y", "missing"])
    def test_resolve_without_version_matches_latest(self, store: LibraryStore, library_id: str) -> None:
        """Test that resolving without a version is the same as resolving latest."""
        assert store.resolve(library_id, None) == store.resolve_latest(library_id)

    def test_unknown_version_is_absent(self, store: LibraryStore) -> None:
        """Test that an unknown version returns a miss with a reason."""
        result = store.resolve("X", "9.9.9")

        assert not result.found
        assert result.document is None
        assert result.reason == 'Failed to resolve library "X" with version "9.9.9"'

    def test_unknown_id_is_absent_without_raising(self, store: LibraryStore) -> None:
        """Test that an unknown id returns a miss instead of raising."""
        result = store.resolve_latest("missing")

        assert not result.found
        assert result.reason == 'Failed to resolve latest version of library "missing"'

    def test_empty_body_is_distinguishable_from_absent(self) -> None:
        """Test that a document with an empty body is still found."""
        store = LibraryStore()
        store.add_json({"identifier": {"id": "Empty", "version": "1.0.0"}})

        result = store.resolve("Empty", "1.0.0")

        assert result.found
        assert result.reason is None
        assert result.document.source == {"identifier": {"id": "Empty", "version": "1.0.0"}}
