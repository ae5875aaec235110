import gzip
import json

import pytest

from mididb.registry.writer import render_outputs, sanitize_for_json, write_outputs


def test_sanitize_replaces_nan_and_infinity():
    data = {"cc": [{"value": float("nan"), "max": float("inf"), "min": 0}], "ok": 1.5}
    assert sanitize_for_json(data) == {"cc": [{"value": None, "max": None, "min": 0}], "ok": 1.5}


def test_render_outputs_shapes():
    final_db = {"version": "1", "Blu Guitar": {"Amp1 Mercury Iridium": {"cc": [{"value": float("nan")}]}}}
    rendered = render_outputs(final_db)
    assert set(rendered) == {"pretty", "minified", "gzip"}
    assert rendered["pretty"].startswith(b'{\n  "version": "1"')
    assert b"\n" not in rendered["minified"]
    assert gzip.decompress(rendered["gzip"]) == rendered["minified"]
    parsed = json.loads(rendered["minified"])
    assert parsed["Blu Guitar"]["Amp1 Mercury Iridium"]["cc"][0]["value"] is None


def test_render_outputs_keeps_non_ascii():
    rendered = render_outputs({"Thérémin Co": {}})
    assert "Thérémin Co".encode("utf-8") in rendered["minified"]


def test_render_outputs_is_reproducible():
    final_db = {"Meris": {"Enzo": {"cc": []}}}
    assert render_outputs(final_db) == render_outputs(final_db)


def test_write_outputs_writes_everything(tmp_path):
    rendered = render_outputs({"Meris": {}})
    paths = {
        "pretty": tmp_path / "out" / "midi.json",
        "minified": tmp_path / "out" / "midi.min.json",
        "gzip": tmp_path / "out" / "midi.min.json.gz",
    }
    result = write_outputs(rendered, paths)
    for kind, path in paths.items():
        assert path.read_bytes() == rendered[kind]
        assert result[kind]["bytes"] == len(rendered[kind])
        assert len(result[kind]["sha256"]) == 64
    assert not list((tmp_path / "out").glob("*.tmp"))


def test_write_outputs_is_all_or_nothing(tmp_path):
    rendered = render_outputs({"Meris": {}})
    paths = {"pretty": tmp_path / "midi.json"}
    with pytest.raises(KeyError):
        write_outputs(rendered, paths)
    assert list(tmp_path.iterdir()) == []
