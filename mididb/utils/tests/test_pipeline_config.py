from pathlib import Path

from mididb.utils import pipeline_config as cfg


def test_defaults_without_settings():
    assert cfg.input_dir({}) == Path("canonical/registry_inputs")
    assert cfg.output_dir({}) == Path("canonical/outputs")
    assert cfg.alias_config_path({}) == Path("canonical/support/alias_mapping.yaml")
    assert cfg.source_file({}) == "all.json"
    assert cfg.target_prefix({}) == "midi-database-v"
    assert cfg.output_names({}) == {
        "pretty": "midi.json",
        "minified": "midi.min.json",
        "gzip": "midi.min.json.gz",
    }


def test_settings_override_defaults():
    settings = {
        "input_dir": "data/in",
        "source_file": "everything.json",
        "output_names": {"pretty": "db.json", "bogus": "x.json"},
    }
    assert cfg.input_dir(settings) == Path("data/in")
    assert cfg.source_file(settings) == "everything.json"
    names = cfg.output_names(settings)
    assert names["pretty"] == "db.json"
    assert "bogus" not in names


def test_null_setting_falls_back_to_default():
    assert cfg.get_setting("output_dir", "fallback", {"output_dir": None}) == "fallback"


def test_load_central_config_prefers_first_candidate(tmp_path):
    first = tmp_path / "settings.conf"
    second = tmp_path / "config.yaml"
    first.write_text("output_dir: from_settings\n", encoding="utf-8")
    second.write_text("output_dir: from_yaml\n", encoding="utf-8")
    assert cfg.load_central_config([str(first), str(second)]) == {"output_dir": "from_settings"}


def test_load_central_config_skips_bad_files(tmp_path):
    broken = tmp_path / "settings.conf"
    broken.write_text("output_dir: [", encoding="utf-8")
    listed = tmp_path / "other.yaml"
    listed.write_text("- a\n- b\n", encoding="utf-8")
    good = tmp_path / "config.yaml"
    good.write_text("input_dir: in\n", encoding="utf-8")
    assert cfg.load_central_config([str(broken), str(listed), str(good)]) == {"input_dir": "in"}
    assert cfg.load_central_config([str(tmp_path / "missing.conf")]) == {}
