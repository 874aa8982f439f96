"""Property-based tests for path resolution and mapping projection.

Documents are generated as arbitrary JSON trees with Hypothesis.
"""

from __future__ import annotations

import json

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from sopsprovider.sops.mapper import MappingEntry, resolve_mapping_path, resolve_mappings

# ---------------------------------------------------------------------------
# Hypothesis strategies
# ---------------------------------------------------------------------------

_key = st.text(alphabet="abcdefghij", min_size=1, max_size=3)

_scalar = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(10**9), max_value=10**9),
    st.floats(allow_nan=False, allow_infinity=False),
    st.text(max_size=20),
)

_json_tree = st.recursive(
    _scalar,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(_key, children, max_size=4),
    ),
    max_leaves=20,
)

_document = st.dictionaries(_key, _json_tree, max_size=5)
_path = st.lists(_key, min_size=1, max_size=4)
_encoding = st.sampled_from(["string", "json"])


def _walk(document, path):
    """Reference lookup: (found, value)."""
    node = document
    for segment in path:
        if not isinstance(node, dict) or segment not in node:
            return False, None
        node = node[segment]
    return True, node


@settings(max_examples=200)
@given(document=_document, path=_path, encoding=_encoding)
def test_resolution_matches_reference_walk(document, path, encoding) -> None:
    found, value = _walk(document, path)
    result = resolve_mapping_path(document, path, encoding)

    if not found:
        assert result is None
    elif encoding == "json":
        assert result is not None
        assert json.loads(result) == value
    elif value is None or isinstance(value, (dict, list)):
        assert result is None
    else:
        assert isinstance(result, str)


@settings(max_examples=200)
@given(value=_json_tree, path=_path)
def test_json_encoding_round_trips(value, path) -> None:
    document: dict = value
    for segment in reversed(path):
        document = {segment: document}

    result = resolve_mapping_path(document, path, "json")

    assert result is not None
    assert json.loads(result) == value


@settings(max_examples=200)
@given(
    composite=st.one_of(
        st.lists(_scalar, max_size=3), st.dictionaries(_key, _scalar, max_size=3)
    ),
    path=_path,
)
def test_string_encoding_of_composite_is_absent(composite, path) -> None:
    document: dict = {path[-1]: composite}
    for segment in reversed(path[:-1]):
        document = {segment: document}

    assert resolve_mapping_path(document, path, "string") is None


@settings(max_examples=200)
@given(document=_document, path=_path, scalar=_scalar, encoding=_encoding)
def test_non_dict_intermediate_is_absent(document, path, scalar, encoding) -> None:
    assume(len(path) > 1)
    document = dict(document)
    document[path[0]] = scalar

    assert resolve_mapping_path(document, path, encoding) is None


@settings(max_examples=200)
@given(
    document=_document,
    mappings=st.dictionaries(
        st.text(min_size=1, max_size=10),
        st.builds(MappingEntry, path=_path, encoding=_encoding),
        max_size=6,
    ),
)
def test_projection_keys_are_exactly_the_resolvable_ones(document, mappings) -> None:
    projected = resolve_mappings(document, mappings)

    assert set(projected) <= set(mappings)
    for name, entry in mappings.items():
        expected = resolve_mapping_path(document, entry.path, entry.encoding)
        if expected is None:
            assert name not in projected
        else:
            assert projected[name] == expected
