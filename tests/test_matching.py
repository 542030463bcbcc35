"""
Tests for structural matching.
"""
from collections import OrderedDict

from mock_console.matching import deep_equal, entries_match, rule_matches
from mock_console.types import AllowRule, Expectation, LogKind, Message


class Opaque:
    """Object without its own equality."""


class TestDeepEqual:
    """Tests for deep_equal()."""

    def test_primitives(self):
        """Equal primitives match, different ones do not."""
        assert deep_equal("a", "a")
        assert deep_equal(3, 3)
        assert deep_equal(None, None)
        assert not deep_equal("a", "b")
        assert not deep_equal(3, "3")

    def test_bool_is_not_a_number(self):
        """True and 1 are different console arguments."""
        assert not deep_equal(True, 1)
        assert not deep_equal(0, False)
        assert deep_equal(False, False)

    def test_int_and_float(self):
        """Numeric equality follows Python."""
        assert deep_equal(1, 1.0)

    def test_nested_structures(self):
        """Lists and dicts compare recursively."""
        left = {"a": [1, {"b": (2, 3)}], "c": None}
        right = {"c": None, "a": [1, {"b": [2, 3]}]}

        assert deep_equal(left, right)

    def test_mapping_keys_must_agree(self):
        """A missing or extra key is a difference."""
        assert not deep_equal({"a": 1}, {"a": 1, "b": 2})
        assert not deep_equal({"a": 1}, {"b": 1})

    def test_mapping_types_interchangeable(self):
        """Any mapping compares by content."""
        assert deep_equal(OrderedDict([("x", 1)]), {"x": 1})

    def test_sequence_against_scalar(self):
        """A list never equals a string or a mapping."""
        assert not deep_equal(["a"], "a")
        assert not deep_equal([], {})

    def test_sequence_length(self):
        """Prefixes do not match."""
        assert not deep_equal([1, 2], [1, 2, 3])

    def test_plain_objects_use_identity(self):
        """Without __eq__ only the same object matches."""
        obj = Opaque()

        assert deep_equal(obj, obj)
        assert not deep_equal(obj, Opaque())
        assert deep_equal([obj], [obj])


class TestEntryMatching:
    """Tests for entries_match() and rule_matches()."""

    def test_entries_need_same_kind(self):
        """Kind is compared before arguments."""
        expected = Expectation(LogKind.LOG, ("x",))

        assert entries_match(expected, Message(LogKind.LOG, ("x",)))
        assert not entries_match(expected, Message(LogKind.WARN, ("x",)))

    def test_rule_positional_args(self):
        """Without a predicate the args must be equal."""
        rule = AllowRule(type="warn", args=["x", 1])

        assert rule_matches(rule, Message(LogKind.WARN, ("x", 1)))
        assert not rule_matches(rule, Message(LogKind.WARN, ("x",)))

    def test_rule_predicate_replaces_args(self):
        """A predicate decides on its own once the kind agrees."""
        rule = AllowRule(
            type=LogKind.ERROR,
            args=("prefix",),
            match=lambda r, m: str(m.args[0]).startswith(r.args[0]),
        )

        assert rule_matches(rule, Message(LogKind.ERROR, ("prefix: details", 42)))
        assert not rule_matches(rule, Message(LogKind.ERROR, ("other",)))
        assert not rule_matches(rule, Message(LogKind.LOG, ("prefix",)))
