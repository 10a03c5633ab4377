"""Unit tests for extreg.selection.selector: publish and changed selection modes."""
from __future__ import annotations

import logging

import pytest

from extreg.errors import SelectionError
from extreg.model.nodes import Registry, RegistryEntry
from extreg.selection.selector import (
    SelectionMode,
    changed_extension_ids,
    published_index_from_keys,
    select_extension_ids,
    unpublished_extension_ids,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _registry(**versions: str) -> Registry:
    return Registry(entries=tuple(
        RegistryEntry(id=extension_id.replace("_", "-"), version=version, source=extension_id)
        for extension_id, version in versions.items()
    ))


_EMPTY = Registry()


# ===========================================================================
# unpublished_extension_ids
# ===========================================================================


class TestUnpublished:
    def test_selects_missing_version(self) -> None:
        registry = _registry(a="1.0.0", b="2.0.0")
        assert unpublished_extension_ids(registry, {"a": {"1.0.0"}}) == ["b"]

    def test_new_version_of_published_id_is_selected(self) -> None:
        registry = _registry(a="1.1.0")
        assert unpublished_extension_ids(registry, {"a": {"1.0.0"}}) == ["a"]

    def test_everything_published(self) -> None:
        registry = _registry(a="1.0.0", b="2.0.0")
        published = {"a": frozenset({"0.9.0", "1.0.0"}), "b": frozenset({"2.0.0"})}
        assert unpublished_extension_ids(registry, published) == []

    def test_registry_order_is_kept(self) -> None:
        registry = _registry(zeta="1.0.0", alpha="1.0.0", mid="1.0.0")
        assert unpublished_extension_ids(registry, {}) == ["zeta", "alpha", "mid"]

    def test_versions_of_other_ids_do_not_count(self) -> None:
        registry = _registry(a="1.0.0")
        assert unpublished_extension_ids(registry, {"b": {"1.0.0"}}) == ["a"]

    def test_empty_registry(self) -> None:
        assert unpublished_extension_ids(_EMPTY, {"a": {"1.0.0"}}) == []

    def test_logs_selection(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="extreg.selection.selector"):
            unpublished_extension_ids(_registry(a="1.0.0", b="1.0.0"), {})
        assert "Extensions needing to be published: a, b" in caplog.text


# ===========================================================================
# changed_extension_ids
# ===========================================================================


class TestChanged:
    def test_selects_changed_version(self) -> None:
        current = _registry(a="1.1.0", b="2.0.0")
        reference = _registry(a="1.0.0", b="2.0.0")
        assert changed_extension_ids(current, reference) == ["a"]

    def test_selects_new_extension(self) -> None:
        current = _registry(a="1.0.0", c="0.1.0")
        reference = _registry(a="1.0.0")
        assert changed_extension_ids(current, reference) == ["c"]

    def test_removed_extension_is_not_selected(self) -> None:
        current = _registry(a="1.0.0")
        reference = _registry(a="1.0.0", gone="3.0.0")
        assert changed_extension_ids(current, reference) == []

    def test_downgrade_counts_as_change(self) -> None:
        assert changed_extension_ids(_registry(a="0.9.0"), _registry(a="1.0.0")) == ["a"]

    def test_empty_reference_selects_everything(self) -> None:
        current = _registry(b="1.0.0", a="1.0.0")
        assert changed_extension_ids(current, _EMPTY) == ["b", "a"]

    def test_empty_registry(self) -> None:
        assert changed_extension_ids(_EMPTY, _registry(a="1.0.0")) == []


# ===========================================================================
# published_index_from_keys
# ===========================================================================


class TestPublishedIndexFromKeys:
    def test_groups_versions_by_id(self) -> None:
        keys = [
            "extensions/a/1.0.0/archive.tar.gz",
            "extensions/a/1.0.0/manifest.json",
            "extensions/a/1.1.0/archive.tar.gz",
            "extensions/b-c/0.1.0/archive.tar.gz",
        ]
        assert published_index_from_keys(keys) == {
            "a": frozenset({"1.0.0", "1.1.0"}),
            "b-c": frozenset({"0.1.0"}),
        }

    def test_ignores_keys_outside_prefix_or_shape(self) -> None:
        keys = [
            "other/a/1.0.0/archive.tar.gz",
            "extensions/a/archive.tar.gz",
            "extensions/a/1.0.0/nested/archive.tar.gz",
            "extensions-old/a/1.0.0/archive.tar.gz",
        ]
        assert published_index_from_keys(keys) == {}

    def test_custom_prefix(self) -> None:
        keys = ["pub/ext/a/1.0.0/f", "extensions/a/2.0.0/f"]
        assert published_index_from_keys(keys, prefix="pub/ext/") == {"a": frozenset({"1.0.0"})}

    def test_feeds_unpublished_selection(self) -> None:
        index = published_index_from_keys(["extensions/a/1.0.0/f"])
        assert unpublished_extension_ids(_registry(a="1.0.0", b="1.0.0"), index) == ["b"]


# ===========================================================================
# select_extension_ids
# ===========================================================================


class TestSelectExtensionIds:
    def test_publish_mode(self) -> None:
        registry = _registry(a="1.0.0", b="2.0.0")
        selected = select_extension_ids(
            registry, SelectionMode.PUBLISH, published={"a": {"1.0.0"}}
        )
        assert selected == ["b"]

    def test_changed_mode(self) -> None:
        selected = select_extension_ids(
            _registry(a="1.1.0", b="2.0.0"),
            SelectionMode.CHANGED,
            reference=_registry(a="1.0.0", b="2.0.0"),
        )
        assert selected == ["a"]

    def test_publish_mode_requires_index(self) -> None:
        with pytest.raises(SelectionError, match="published index"):
            select_extension_ids(_registry(a="1.0.0"), SelectionMode.PUBLISH)

    def test_changed_mode_requires_reference(self) -> None:
        with pytest.raises(SelectionError, match="reference registry"):
            select_extension_ids(_registry(a="1.0.0"), SelectionMode.CHANGED)

    def test_only_narrows_selection(self) -> None:
        selected = select_extension_ids(
            _registry(a="1.0.0", b="1.0.0"), SelectionMode.PUBLISH, published={}, only="b"
        )
        assert selected == ["b"]

    def test_only_already_published(self) -> None:
        selected = select_extension_ids(
            _registry(a="1.0.0"), SelectionMode.PUBLISH, published={"a": {"1.0.0"}}, only="a"
        )
        assert selected == []

    def test_only_unknown_id(self) -> None:
        with pytest.raises(SelectionError, match="No such extension: nope"):
            select_extension_ids(_registry(a="1.0.0"), SelectionMode.PUBLISH, published={}, only="nope")

    def test_empty_registry_in_both_modes(self) -> None:
        assert select_extension_ids(_EMPTY, SelectionMode.PUBLISH, published={}) == []
        assert select_extension_ids(_EMPTY, SelectionMode.CHANGED, reference=_EMPTY) == []
