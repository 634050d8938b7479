import json
import sys

import pytest

from esdeprecation.__main__ import main

INDICES = {
    "old_index": {
        "aliases": {},
        "mappings": {"doc": {"properties": {"created": {"type": "date", "format": "yyyy-MM-dd"}}}},
        "settings": {"index": {"version": {"created": "6080099"}, "number_of_shards": "1"}},
    },
    "new_index": {
        "aliases": {},
        "mappings": {"properties": {"title": {"type": "text"}}},
        "settings": {"index.version.created": "7170099"},
    },
}

NODES = {"nodes": {"n1": {"name": "hot-1", "roles": ["data_hot", "data_content"]}}}


def run_main(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["esdeprecation", *args])
    main()


def test_check(tmp_path, monkeypatch, capsys):
    path = tmp_path / "indices.json"
    path.write_text(json.dumps(INDICES))
    run_main(monkeypatch, "check", str(path))
    result = json.loads(capsys.readouterr().out)
    assert list(result.keys()) == ["old_index"]
    assert [issue["message"] for issue in result["old_index"]] == [
        "Index created before 7.0",
        "Date field format uses patterns which has changed meaning in 7.0",
    ]
    assert result["old_index"][0]["level"] == "critical"
    assert "6.8.0" in result["old_index"][0]["details"]


def test_check_with_nodes(tmp_path, monkeypatch, capsys):
    indices = tmp_path / "indices.json"
    indices.write_text(json.dumps(INDICES))
    nodes = tmp_path / "nodes.json"
    nodes.write_text(json.dumps(NODES))
    run_main(monkeypatch, "check", str(indices), "--nodes", str(nodes))
    result = json.loads(capsys.readouterr().out)
    assert set(result.keys()) == {"old_index", "new_index"}
    assert "_tier_preference" in result["new_index"][0]["message"]


def test_fail_on_critical(tmp_path, monkeypatch, capsys):
    path = tmp_path / "indices.json"
    path.write_text(json.dumps(INDICES))
    with pytest.raises(SystemExit) as e:
        run_main(monkeypatch, "check", "--fail-on-critical", str(path))
    assert e.value.code == 2


def test_missing_file(tmp_path, monkeypatch):
    with pytest.raises(SystemExit) as e:
        run_main(monkeypatch, "check", str(tmp_path / "missing.json"))
    assert e.value.code == 1


def test_config(monkeypatch, capsys):
    run_main(monkeypatch, "config")
    out = capsys.readouterr().out
    assert "ESDEPRECATION_MAX_MAPPING_DEPTH=10000" in out
    assert "ESDEPRECATION_FIELD_EXPANSION_LIMIT=1024" in out


def test_missing_nodes_file(tmp_path, monkeypatch):
    path = tmp_path / "indices.json"
    path.write_text(json.dumps(INDICES))
    with pytest.raises(SystemExit) as e:
        run_main(monkeypatch, "check", str(path), "--nodes", str(tmp_path / "missing.json"))
    assert e.value.code == 1


def test_json_nested_too_deep(tmp_path, monkeypatch, caplog):
    depth = 100000
    path = tmp_path / "deep.json"
    path.write_text('{"deep": {"mappings": ' + '{"a": ' * depth + "1" + "}" * depth + "}}")
    with pytest.raises(SystemExit) as e:
        run_main(monkeypatch, "check", str(path))
    assert e.value.code == 1
    assert "nested too deep" in caplog.text
