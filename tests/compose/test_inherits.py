"""Tests for inherits() and ancestry queries."""

import pytest as _pytest

import amalgam.compose as compose
import amalgam.errors as errors


class TestInherits:
    """Tests for inherits()."""

    def test_direct_and_transitive(self) -> None:
        """Composed objects inherit everything they were built from."""
        grandparent: dict = {"a": 1}
        parent = {"implement": [grandparent]}
        obj = compose.create({"implement": [parent]})
        assert compose.inherits(obj, parent)
        assert compose.inherits(obj, grandparent)

    def test_unrelated_definition(self) -> None:
        """A definition that was never applied is not inherited."""
        obj = compose.create({"a": 1})
        assert not compose.inherits(obj, {"a": 1})

    def test_primary_definition(self) -> None:
        """An object inherits the definition it was created from."""
        definition = {"a": 1}
        assert compose.inherits(compose.create(definition), definition)

    def test_explicit_implementors(self) -> None:
        """Implementors passed to create() are part of the ancestry."""
        mixin: dict = {}
        obj = compose.create([mixin], {"a": 1})
        assert compose.inherits(obj, mixin)

    def test_composed_object_as_query(self) -> None:
        """A composed object stands for the definition it came from."""
        parent = compose.create({"a": 1})
        child = compose.create([parent], {"b": 2})
        assert compose.inherits(child, parent)
        assert not compose.inherits(parent, child)

    def test_plain_definitions(self) -> None:
        """Definitions can be checked without composing them."""
        mixin: dict = {}
        definition = {"implement": [mixin]}
        assert compose.inherits(definition, mixin)
        assert compose.inherits(definition, definition)
        assert not compose.inherits(mixin, definition)

    def test_reached_through_deduplicated_path(self) -> None:
        """A diamond ancestor is found no matter which path applied it."""
        shared: dict = {}
        left = {"implement": [shared]}
        right = {"implement": [shared]}
        obj = compose.create({"implement": [left, right]})
        assert compose.inherits(obj, shared)
        assert compose.inherits(obj, right)

    def test_identity_not_equality(self) -> None:
        """Equal but distinct definitions are different definitions."""
        obj = compose.create([{}], {})
        assert not compose.inherits(obj, {})

    def test_non_mapping_object(self) -> None:
        """Only definitions and composed objects can be inspected."""
        with _pytest.raises(errors.UsageError):
            compose.inherits(42, {})


class TestAncestry:
    """Tests for the ancestry tag helpers."""

    def test_ancestry_records_create_arguments(self) -> None:
        """The tag holds the primary definition and the implementors."""
        mixin: dict = {}
        definition = {"a": 1}
        tag = compose.ancestry_of(compose.create([mixin], definition))
        assert tag is not None
        assert tag.definition is definition
        assert tag.implementors == (mixin,)

    def test_children_order(self) -> None:
        """Explicit implementors come before the definition's own list."""
        first: dict = {}
        second: dict = {}
        node = compose.Ancestry({"implement": [second]}, (first,))
        assert node.children == (first, second)
