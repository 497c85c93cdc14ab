from __future__ import annotations

import pytest

from contracts.errors import MalformedResponseError
from contracts.metrics import MetricsMapping, metrics_equal


def test_equal_mappings_ignore_key_order():
    left = MetricsMapping({"events": 3, "t_hash": "ab"})
    right = MetricsMapping({"t_hash": "ab", "events": 3})
    assert left == right
    assert hash(left) == hash(right)


def test_missing_or_extra_key_is_a_mismatch():
    reference = MetricsMapping({"events": 3, "t_hash": "ab"})
    assert reference != MetricsMapping({"events": 3})
    assert reference != MetricsMapping({"events": 3, "t_hash": "ab", "x_hash": "cd"})
    assert reference != MetricsMapping({"events": 3, "x_hash": "ab"})


def test_values_compare_without_coercion():
    assert MetricsMapping({"events": 1}) != MetricsMapping({"events": 1.0})
    assert MetricsMapping({"events": 1}) != MetricsMapping({"events": True})
    assert MetricsMapping({"events": "1"}) != MetricsMapping({"events": 1})


def test_floats_have_no_tolerance():
    assert MetricsMapping({"sum": 0.1 + 0.2}) != MetricsMapping({"sum": 0.3})


def test_nested_values_are_rejected():
    with pytest.raises(MalformedResponseError):
        MetricsMapping({"events": [1, 2]})


def test_from_document_requires_hashes():
    with pytest.raises(MalformedResponseError):
        MetricsMapping.from_document({"duration": 10})
    metrics = MetricsMapping.from_document({"duration": 10, "hashes": {"events": 2}})
    assert metrics.to_dict() == {"events": 2}


def test_text_rendering_indents_four_spaces_per_level():
    metrics = MetricsMapping({"events": 3, "t_hash": "ab"})
    assert metrics.to_text() == "    events: 3\n    t_hash: ab"
    assert metrics.to_text(indent=2).splitlines()[0] == "        events: 3"


def test_digest_is_stable_across_key_order():
    left = MetricsMapping({"events": 3, "t_hash": "ab"})
    right = MetricsMapping({"t_hash": "ab", "events": 3})
    assert left.digest() == right.digest()
    assert left.digest().startswith("sha256-")


def test_metrics_equal_works_on_plain_mappings():
    assert metrics_equal({"a": "x"}, {"a": "x"})
    assert not metrics_equal({"a": "x"}, {"a": "y"})
