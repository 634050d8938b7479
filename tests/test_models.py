import pytest
from pydantic import ValidationError

from esdeprecation.checks import chained_multi_fields_check
from esdeprecation.data_tiers import data_nodes_without_all_data_roles, parse_tier_list
from esdeprecation.index_settings import flatten_settings
from esdeprecation.models import (
    V_7_0_0,
    ClusterState,
    DeprecationIssue,
    DeprecationLevel,
    IndexMetadata,
    Version,
)


def test_version():
    assert str(Version.parse("6.8.23")) == "6.8.23"
    assert str(Version.parse("7.17.0-SNAPSHOT")) == "7.17.0"
    assert Version.parse("7") == V_7_0_0
    assert Version.from_id(6080099) == Version.parse("6.8.0")
    assert Version.from_id("7100299") == Version.parse("7.10.2")

    assert Version.parse("6.8.0").before(V_7_0_0)
    assert not V_7_0_0.before(V_7_0_0)
    assert Version.parse("6.10.0") > Version.parse("6.9.9")
    assert sorted([Version.parse("7.1.0"), Version.parse("6.0.0"), Version.parse("7.0.1")]) == [
        Version.parse("6.0.0"),
        Version.parse("7.0.1"),
        Version.parse("7.1.0"),
    ]


@pytest.mark.parametrize("version", ["", "seven", "7.x", "1.2.3.4"])
def test_invalid_version(version):
    with pytest.raises(ValueError):
        Version.parse(version)


def test_issue_is_frozen():
    issue = DeprecationIssue(level=DeprecationLevel.warning, message="m", url="u", details="d")
    with pytest.raises(ValidationError):
        issue.message = "changed"  # type: ignore
    assert issue.model_dump(mode="json") == {
        "level": "warning",
        "message": "m",
        "url": "u",
        "details": "d",
        "resolve_during_rolling_upgrade": False,
        "meta": None,
    }


def test_level_docs():
    assert DeprecationLevel.critical.__doc__ is not None
    assert "fail" in DeprecationLevel.critical.__doc__


def test_flatten_settings():
    nested = {"index": {"number_of_shards": "1", "routing": {"allocation": {"require": {"_tier": "hot"}}}}}
    assert flatten_settings(nested) == {
        "index.number_of_shards": "1",
        "index.routing.allocation.require._tier": "hot",
    }
    flat = {"index.number_of_shards": "1"}
    assert flatten_settings(flat) == flat


def test_from_elastic_typeless():
    body = {
        "aliases": {},
        "mappings": {"_source": {"enabled": True}, "properties": {"title": {"type": "text"}}},
        "settings": {"index": {"version": {"created": "7100299"}, "frozen": "true"}},
    }
    index = IndexMetadata.from_elastic("test", body)
    assert index.name == "test"
    assert index.creation_version == Version.parse("7.10.2")
    assert index.settings["index.frozen"] == "true"
    assert len(index.mappings) == 1
    assert index.mapping().type == "_doc"
    assert index.mapping().source["properties"] == {"title": {"type": "text"}}


def test_from_elastic_typed():
    body = {
        "mappings": {
            "doc": {"properties": {"a": {"type": "keyword"}}},
            "other": {"_all": {"enabled": False}, "properties": {"b": {"type": "keyword"}}},
        },
        "settings": {"index.version.created": "6080099"},
    }
    index = IndexMetadata.from_elastic("old", body)
    assert index.creation_version == Version.parse("6.8.0")
    assert [m.type for m in index.mappings] == ["doc", "other"]
    assert index.mappings[1].source["properties"] == {"b": {"type": "keyword"}}


def test_from_elastic_no_mapping():
    index = IndexMetadata.from_elastic("empty", {"mappings": {}, "settings": {"index.version.created": "7170099"}})
    assert index.mappings == []
    assert index.mapping() is None


def test_from_elastic_no_version():
    with pytest.raises(ValueError):
        IndexMetadata.from_elastic("x", {"settings": {}})


def test_cluster_state_from_elastic():
    body = {
        "nodes": {
            "abc": {"name": "node-1", "roles": ["data_hot", "master"]},
            "def": {"name": "node-2", "roles": ["data", "ingest"]},
            "ghi": {"name": "node-3", "roles": ["ml"]},
        }
    }
    state = ClusterState.from_elastic(body)
    assert [n.name for n in state.nodes] == ["node-1", "node-2", "node-3"]
    assert [n.name for n in data_nodes_without_all_data_roles(state)] == ["node-1"]


def test_parse_tier_list():
    assert parse_tier_list("data_warm, data_hot") == ["data_warm", "data_hot"]
    assert parse_tier_list("") == []
    assert parse_tier_list(None) == []
    assert parse_tier_list(" , ") == []


def test_from_elastic_typed_doc():
    """A type named _doc (6.x, or include_type_name=true in 7.x) is a type, not a root metadata field"""
    properties = {"title": {"type": "text", "fields": {"raw": {"type": "keyword", "fields": {"lower": {"type": "keyword"}}}}}}
    body = {"mappings": {"_doc": {"properties": properties}}, "settings": {"index.version.created": "6080099"}}
    index = IndexMetadata.from_elastic("old", body)
    assert [m.type for m in index.mappings] == ["_doc"]
    assert index.mapping().source == {"properties": properties}
    issue = chained_multi_fields_check(index)
    assert issue is not None
    assert "[type: _doc, field: title]" in issue.details


def test_from_elastic_skips_default_mapping():
    body = {
        "mappings": {
            "_default_": {"_all": {"enabled": False}},
            "doc": {"properties": {"title": {"type": "text", "fields": {"raw": {"fields": {"x": {}}}}}}},
        },
        "settings": {"index.version.created": "5060099"},
    }
    index = IndexMetadata.from_elastic("older", body)
    assert [m.type for m in index.mappings] == ["doc"]
    issue = chained_multi_fields_check(index)
    assert issue is not None
    assert "[type: doc, field: title]" in issue.details


def test_from_elastic_typeless_with_metadata_fields():
    body = {"mappings": {"_routing": {"required": True}}, "settings": {"index.version.created": "7170099"}}
    index = IndexMetadata.from_elastic("routed", body)
    assert [m.type for m in index.mappings] == ["_doc"]
    assert index.mapping().source == {"_routing": {"required": True}}
