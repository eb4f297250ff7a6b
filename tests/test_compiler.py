"""Tests for jl_core.compiler."""

import pytest

from jl_core import (
    ArrayOp,
    CollectOp,
    ObjectOp,
    PatternError,
    compile_pattern,
    find_root,
)


def prop_names(obj):
    """Property names in declaration order."""
    return [p.name for p in reversed(obj.props)]


# ---------------------------------------------------------------------------
# Arrays
# ---------------------------------------------------------------------------

class TestArray:
    def test_wildcard(self):
        p = compile_pattern("[*]")
        assert isinstance(p.op, ArrayOp)
        assert isinstance(p.op.next, CollectOp)
        assert p.op.table is p.op.next.table
        assert p.op.next.column == 0
        assert len(p.registry) == 1
        assert p.registry[0].ncols == 1

    def test_closing_bracket_optional(self):
        p = compile_pattern("[*")
        assert isinstance(p.op.next, CollectOp)

    def test_nested_array_has_no_table(self):
        p = compile_pattern("[[*]]")
        assert p.op.table is None
        assert isinstance(p.op.next, ArrayOp)
        assert p.op.next.table is not None

    def test_array_of_objects(self):
        p = compile_pattern("[{foo,bar}]")
        assert p.op.table is None
        obj = p.op.next
        assert isinstance(obj, ObjectOp)
        assert prop_names(obj) == ["foo", "bar"]


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------

class TestObject:
    def test_leaf_properties_share_table(self):
        p = compile_pattern("{a,b,c}")
        obj = p.op
        assert len(p.registry) == 1
        assert obj.table is p.registry[0]
        assert obj.table.ncols == 3
        for prop in obj.props:
            assert prop.op.table is obj.table

    def test_columns_follow_declaration_order(self):
        obj = compile_pattern("{a,b,c}").op
        assert [obj.find(n).op.column for n in ("a", "b", "c")] == [0, 1, 2]

    def test_lookup_list_is_most_recent_first(self):
        obj = compile_pattern("{a,b,c}").op
        assert [p.name for p in obj.props] == ["c", "b", "a"]

    def test_nested_clause_owns_table(self):
        p = compile_pattern("{user,pets[{name}]}")
        obj = p.op
        assert len(p.registry) == 2
        assert p.registry[0] is obj.table
        pets = obj.find("pets").op
        assert isinstance(pets, ArrayOp)
        assert pets.table is None
        assert pets.next.table is p.registry[1]

    def test_registry_order_is_discovery_order(self):
        p = compile_pattern("{pets[{name}],user}")
        pets_table = p.op.find("pets").op.next.table
        assert p.registry[0] is pets_table
        assert p.registry[1] is p.op.table

    def test_object_without_leaves_has_no_table(self):
        p = compile_pattern("{a{b},c[*]}")
        assert p.op.table is None
        assert len(p.registry) == 2

    def test_quoted_name(self):
        obj = compile_pattern('{"a,b[c]"}').op
        assert prop_names(obj) == ["a,b[c]"]

    def test_quoted_name_keeps_escapes(self):
        obj = compile_pattern(r'{"say \"hi\""}').op
        assert prop_names(obj) == [r'say \"hi\"']

    def test_empty_quoted_name_allowed(self):
        obj = compile_pattern('{""}').op
        assert prop_names(obj) == [""]

    def test_bare_name_may_contain_spaces(self):
        obj = compile_pattern("{first name,last name}").op
        assert prop_names(obj) == ["first name", "last name"]

    def test_trailing_closers_optional(self):
        p = compile_pattern("{a{b{c")
        assert p.op.find("a").op.find("b").op.find("c") is not None

    def test_duplicate_names_last_declared_wins(self):
        obj = compile_pattern("{a,a}").op
        assert obj.table.ncols == 2
        assert obj.find("a").op.column == 1


# ---------------------------------------------------------------------------
# Invalid patterns
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", [
    "",
    "foo",
    "*",
    "[",
    "[]",
    "[x]",
    "[*x",
    "[**]",
    "{",
    "{}",
    "{,a}",
    "{a,}",
    "{a]",
    "{a[x]}",
    "{a[*]b}",
    '{"abc',
    "[*]]",
    "{a}}",
    "{a} ",
])
def test_invalid_patterns(text):
    with pytest.raises(PatternError, match="invalid pattern"):
        compile_pattern(text)

def test_error_carries_offset():
    with pytest.raises(PatternError) as info:
        compile_pattern("{a,}")
    assert info.value.pos == 3
    assert info.value.reason == "empty property name"


# ---------------------------------------------------------------------------
# Root determination
# ---------------------------------------------------------------------------

def root_of(text):
    p = compile_pattern(text)
    roots = _all_roots(p.op)
    assert roots == [p.root]
    return p


def _all_roots(op):
    found = []
    if isinstance(op, ArrayOp):
        if op.is_root:
            found.append(op)
        found += _all_roots(op.next)
    elif isinstance(op, ObjectOp):
        if op.is_root:
            found.append(op)
        for prop in op.props:
            found += _all_roots(prop.op)
    return found


class TestRoot:
    def test_wildcard_array_is_root(self):
        p = root_of("[*]")
        assert p.root is p.op

    def test_inner_wildcard_is_root(self):
        p = root_of("[[*]]")
        assert p.root is p.op.next

    def test_object_with_several_properties(self):
        p = root_of("[{foo,bar}]")
        assert p.root is p.op.next

    def test_object_with_single_leaf(self):
        p = root_of("{foo}")
        assert p.root is p.op

    def test_descends_single_nested_property(self):
        p = root_of("{a{b{c}}}")
        assert p.root is p.op.find("a").op.find("b").op

    def test_descends_into_array_under_object(self):
        p = root_of("{items[*]}")
        assert p.root is p.op.find("items").op

    def test_outer_object_groups_independent_collections(self):
        p = root_of("{user,pets[{name}]}")
        assert p.root is p.op

    def test_root_is_computed_once(self):
        p = compile_pattern("{a,b}")
        assert find_root(p.op) is p.root
        assert p.root.is_root
