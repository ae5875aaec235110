from pathlib import Path

from mididb.utils.logging import attach_meta, tool_log_path


def test_tool_log_path_prefixes_script_once():
    assert tool_log_path("canonical/logs/merge.log", "merge_pipeline_main") == Path(
        "canonical/logs/tools/merge_pipeline_main_merge.log"
    )
    assert tool_log_path("x/merge_pipeline_main_merge.log", "merge_pipeline_main").name == (
        "merge_pipeline_main_merge.log"
    )


def test_attach_meta():
    meta = attach_meta("/somewhere/mididb/registry/generator.py", "midi_database_merge", "generator")
    assert meta["_meta"]["source"] == "generator.py"
    assert meta["_meta"]["contract"] == "midi_database_merge"
    assert meta["_meta"]["pipeline_stage"] == "generator"
    assert "pipeline_stage" not in attach_meta("a.py", "tag")["_meta"]
