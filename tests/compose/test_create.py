"""Tests for create() and multiple-inheritance composition."""

import copy as _copy

import pytest as _pytest

import amalgam.chains as chains
import amalgam.compose as compose
import amalgam.constants as constants
import amalgam.errors as errors
import amalgam.logging as amalgam_logging
import amalgam.rules as rules
import amalgam.types as types


class TestCreateForms:
    """Tests for the accepted argument forms."""

    def test_definition_only(self) -> None:
        """create(definition) copies the definition's properties."""
        definition = {"a": 1, "b": "two"}
        obj = compose.create(definition)
        assert isinstance(obj, types.Record)
        assert obj == {"a": 1, "b": "two"}
        assert compose.origin(obj) is definition

    def test_implementors_and_definition(self) -> None:
        """Implementors are applied before the definition."""
        first = {"a": 1, "extend_rules": {"*": rules.REPLACE}}
        obj = compose.create([first], {"a": 2})
        assert obj == {"a": 2}

    def test_implementors_only(self) -> None:
        """create([implementors]) composes against an empty definition."""
        obj = compose.create([{"a": 1}, {"b": 2}])
        assert obj == {"a": 1, "b": 2}
        assert compose.origin(obj) == {}

    def test_empty_create(self) -> None:
        """create() with nothing gives an empty composed record."""
        obj = compose.create()
        assert obj == {}
        assert compose.is_composed(obj)

    def test_composed_primary_rejected(self) -> None:
        """A composed object cannot be the primary definition."""
        composed = compose.create({"a": 1})
        with _pytest.raises(errors.UsageError):
            compose.create(composed)

    def test_composed_object_as_implementor(self, calls: list[str]) -> None:
        """A composed object can be built on by passing it as an implementor."""
        composed = compose.create({"a": 1, "make": lambda output, primary, node: calls.append("made")})
        obj = compose.create([composed], {"b": 2})
        assert obj == {"a": 1, "b": 2}
        assert compose.inherits(obj, composed)
        assert calls == ["made", "made"]

    def test_undefined_implementor(self) -> None:
        """A missing implementor is a usage error."""
        with _pytest.raises(errors.UsageError, match="Implementor not defined"):
            compose.create({"implement": [None]})

    def test_implement_must_be_list(self) -> None:
        """A non-list implement value is a usage error."""
        with _pytest.raises(errors.UsageError):
            compose.create({"implement": {"a": 1}})

    def test_non_mapping_definition(self) -> None:
        """Definitions must be mappings."""
        with _pytest.raises(errors.UsageError):
            compose.create([], "not a definition")


class TestOutputRecord:
    """Tests for the shape of the composed object."""

    def test_reserved_keys_not_copied(self) -> None:
        """Composition keys never reach the output."""
        definition = {
            "value": 1,
            "make": lambda output, primary, node: None,
            "integrate": lambda output, node, primary: None,
            "built": lambda output, primary: None,
            "extend_rules": {"value": rules.REPLACE},
            "reinherit": True,
            "implement": [],
        }
        assert compose.create(definition) == {"value": 1}

    def test_ancestry_tag_is_hidden(self) -> None:
        """The ancestry tag is not a key."""
        obj = compose.create({"a": 1})
        assert constants.ANCESTRY_ATTRIBUTE not in obj
        assert list(obj) == ["a"]
        assert compose.ancestry_of(obj) is not None

    def test_plain_dicts_are_not_composed(self) -> None:
        """Only create() output counts as composed."""
        assert not compose.is_composed({"a": 1})
        assert compose.origin({"a": 1}) is None


class TestBase:
    """Tests for the base factory."""

    def test_base_receives_primary(self) -> None:
        """The factory gets the primary definition and seeds the output."""
        seen = []

        def base(definition):
            seen.append(definition)
            return {"kind": "seeded"}

        definition = {"base": base, "a": 1}
        obj = compose.create(definition)
        assert seen == [definition]
        assert obj == {"kind": "seeded", "a": 1}
        assert isinstance(obj, types.Record)

    def test_custom_mapping_type(self) -> None:
        """A factory may return its own mapping type."""

        class Widget(dict):
            pass

        obj = compose.create({"base": lambda definition: Widget(), "a": 1})
        assert type(obj) is Widget
        assert compose.is_composed(obj)

    def test_first_base_in_traversal_order_wins(self) -> None:
        """The implementor's factory is found before the primary's."""
        inner = {"base": lambda definition: {"from": "inner"}}
        outer = {"implement": [inner], "base": lambda definition: {"from": "outer"}}
        assert compose.create(outer)["from"] == "inner"

    def test_base_must_return_mapping(self) -> None:
        """Factories returning something else are a usage error."""
        with _pytest.raises(errors.UsageError):
            compose.create({"base": lambda definition: [1, 2]})


class TestTraversal:
    """Tests for implementor order and diamond deduplication."""

    def test_leaves_first(self) -> None:
        """Implementors are merged before what implements them."""
        order = []
        leaf = {"make": lambda output, primary, node: order.append("leaf")}
        middle = {"implement": [leaf], "make": lambda output, primary, node: order.append("middle")}
        top = {"implement": [middle], "make": lambda output, primary, node: order.append("top")}
        compose.create(top)
        assert order == ["leaf", "middle", "top"]

    def test_diamond_applied_once(self, calls: list[str]) -> None:
        """A shared ancestor is applied once."""
        shared = {"make": lambda output, primary, node: calls.append("shared")}
        left = {"implement": [shared]}
        right = {"implement": [shared]}
        compose.create({"implement": [left, right]})
        assert calls == ["shared"]

    def test_reinherit_applied_every_time(self, calls: list[str]) -> None:
        """reinherit opts a definition out of deduplication."""
        shared = {"reinherit": True, "make": lambda output, primary, node: calls.append("shared")}
        left = {"implement": [shared]}
        right = {"implement": [shared]}
        compose.create({"implement": [left, right]})
        assert calls == ["shared", "shared"]

    def test_cycle_detected(self) -> None:
        """A definition that implements itself is a usage error."""
        looping: dict = {}
        looping["implement"] = [{"implement": [looping]}]
        with _pytest.raises(errors.UsageError, match="cycle"):
            compose.create(looping)


class TestRules:
    """Tests for extend_rules and integrate overrides."""

    def test_extend_rules_govern_later_definitions(self) -> None:
        """Rules from an implementor apply to everything merged after it."""
        named = {"name": "a", "extend_rules": {"name": rules.STRING_APPEND}}
        obj = compose.create({"implement": [named], "name": "b"})
        assert obj["name"] == "ab"

    def test_own_rules_do_not_govern_own_properties(
        self,
        recording_sink: amalgam_logging.RecordingSink,
    ) -> None:
        """A definition's extend_rules only take effect after its own merge."""
        earlier = {"name": "earlier"}
        later = {"name": "later", "extend_rules": {"name": rules.REPLACE}}
        obj = compose.create([earlier], later)
        assert obj["name"] == "earlier"
        assert len(recording_sink.messages) == 1

    def test_extend_rules_accumulate(self) -> None:
        """Later extend_rules entries replace earlier ones."""
        first = {"tags": ["a"], "extend_rules": {"tags": rules.ARRAY_APPEND}}
        second = {"tags": ["b"], "extend_rules": {"tags": rules.ARRAY_PREPEND}}
        obj = compose.create([first, second], {"tags": ["c"]})
        assert obj["tags"] == ["c", "a", "b"]

    def test_integrate_override_for_one_merge(
        self,
        recording_sink: amalgam_logging.RecordingSink,
    ) -> None:
        """Rules returned by integrate apply to that node's merge only."""

        def integrate(output, node, primary):
            if node is middle:
                return {"x": rules.REPLACE}
            return None

        bottom = {"x": 1, "integrate": integrate}
        middle = {"implement": [bottom], "x": 2}
        top = {"implement": [middle], "x": 3}
        obj = compose.create(top)
        assert obj["x"] == 2
        assert len(recording_sink.messages) == 1

    def test_chain_properties_through_composition(self, calls: list[str]) -> None:
        """Chained methods from several definitions run in merge order."""
        first = {
            "init": lambda obj: calls.append("first"),
            "extend_rules": {"init": rules.CHAIN_APPEND},
        }
        second = {"init": lambda obj: calls.append("second")}
        obj = compose.create([first, second])
        assert chains.is_chain(obj["init"])
        obj["init"](obj)
        assert calls == ["first", "second"]

    def test_marked_keys_kept_as_is(self) -> None:
        """Composition does not decode property markers."""
        obj = compose.create([{"title": "world"}], {"__title": "hello "})
        assert obj == {"title": "world", "__title": "hello "}


class TestHooks:
    """Tests for the make, integrate and built hooks."""

    def test_hook_order_and_arguments(self) -> None:
        """make after each merge, integrate before later merges, built at the end."""
        log = []

        def inner_make(output, primary, node):
            log.append(("inner.make", output.get("inner"), output.get("outer"), primary is outer, node is inner))

        def inner_integrate(output, node, primary):
            log.append(("inner.integrate", node is outer, primary is outer))

        def inner_built(output, primary):
            log.append(("inner.built", output.get("outer"), primary is outer))

        def outer_make(output, primary, node):
            log.append(("outer.make", output.get("outer"), node is outer))

        def outer_built(output, primary):
            log.append(("outer.built",))

        inner = {"inner": 1, "make": inner_make, "integrate": inner_integrate, "built": inner_built}
        outer = {"implement": [inner], "outer": 2, "make": outer_make, "built": outer_built}
        compose.create(outer)

        assert log == [
            ("inner.make", 1, None, True, True),
            ("inner.integrate", True, True),
            ("outer.make", 2, True),
            ("inner.built", 2, True),
            ("outer.built",),
        ]

    def test_hooks_receive_the_output(self) -> None:
        """Every hook sees the same output object that create() returns."""
        seen = []
        definition = {
            "make": lambda output, primary, node: seen.append(output),
            "built": lambda output, primary: seen.append(output),
        }
        obj = compose.create(definition)
        assert all(item is obj for item in seen)
        assert len(seen) == 2

    def test_make_can_modify_output(self) -> None:
        """make hooks can set derived properties."""
        definition = {
            "width": 3,
            "height": 4,
            "make": lambda output, primary, node: output.update(area=output["width"] * output["height"]),
        }
        assert compose.create(definition)["area"] == 12

    def test_output_is_tagged_before_hooks(self) -> None:
        """Hooks can already ask about the output's ancestry."""
        answers = []
        mixin = {"make": lambda output, primary, node: answers.append(compose.inherits(output, mixin))}
        compose.create([mixin], {})
        assert answers == [True]

    def test_built_runs_once_per_definition(self, calls: list[str]) -> None:
        """Deduplicated definitions register their built hook once."""
        shared = {"built": lambda output, primary: calls.append("built")}
        compose.create({"implement": [{"implement": [shared]}, {"implement": [shared]}]})
        assert calls == ["built"]


class TestDefinitionsUnchanged:
    """Definitions are never modified by composition."""

    def test_deep_rules_leave_definitions_alone(self) -> None:
        """Nested mappings shared with a definition are copied before merging."""
        base_def = {"opts": {"a": 1}, "extend_rules": {"opts": rules.DEEP_REPLACE}}
        child_def = {"implement": [base_def], "opts": {"b": 2}}
        snapshot = _copy.deepcopy(base_def)

        obj = compose.create(child_def)
        assert obj["opts"] == {"a": 1, "b": 2}
        assert base_def == snapshot

    def test_chains_not_shared_between_objects(self) -> None:
        """Composing twice builds independent chains."""
        first_fn = lambda obj: None  # noqa: E731
        first = {"run": first_fn, "extend_rules": {"run": rules.CHAIN_APPEND}}
        second = {"implement": [first], "run": lambda obj: None}

        one = compose.create(second)
        two = compose.create(second)
        assert one["run"] is not two["run"]
        assert len(one["run"]) == 2
        assert len(two["run"]) == 2
        assert first["run"] is first_fn

    def test_on_leaves_definition_chain_alone(self) -> None:
        """Adding a handler to a composed object does not reach its definition."""
        handlers = chains.make_chain(None, [lambda obj: None])
        definition = {"click": handlers}
        obj = compose.create(definition)
        chains.on(obj, "click", lambda obj: None)
        assert len(handlers) == 1
        assert definition["click"] is handlers
        assert len(obj["click"]) == 2


class TestReentrancy:
    """Composition started from inside a hook of another composition."""

    def test_nested_create_keeps_its_own_seen_set(self, calls: list[str]) -> None:
        """A shared ancestor is applied once in each composition."""
        shared = {"make": lambda output, primary, node: calls.append("shared")}
        inner_def = {"implement": [shared], "kind": "inner"}
        children = []

        def make_child(output, primary, node):
            children.append(compose.create(inner_def))

        outer_def = {"implement": [shared], "kind": "outer", "make": make_child}
        outer = compose.create(outer_def)

        assert calls == ["shared", "shared"]
        assert outer["kind"] == "outer"
        assert children[0]["kind"] == "inner"
        assert compose.inherits(children[0], shared)
        assert compose.inherits(outer, shared)
        assert not compose.inherits(children[0], outer_def)

    def test_nested_merge_inside_rule(self) -> None:
        """A rule may run its own merge while the outer merge is in progress."""

        def combine(existing, incoming, derived):
            return rules.merge(rules.merge({}, existing), incoming, rules.REPLACE)

        target = rules.merge({"a": {"x": 1}}, {"a": {"x": 2, "y": 3}}, {"a": combine})
        assert target == {"a": {"x": 2, "y": 3}}
