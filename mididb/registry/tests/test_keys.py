from mididb.registry.aliases import build_alias_table, empty_alias_table
from mididb.registry.keys import (
    NormalizedKey,
    normalize_brand,
    normalize_device,
    normalize_key,
    slugify_key,
)


def make_table():
    return build_alias_table(
        {
            "brands": [
                {
                    "name": "Access Music",
                    "value": "access",
                    "models": [{"name": "Virus TI Desktop", "value": "virus_ti_desktop", "aliases": ["virustidesk"]}],
                },
                {"name": "BOSS", "value": "boss", "aliases": ["roland"]},
            ]
        }
    )


def test_slugify_key():
    assert slugify_key("Deepmind  12 D") == "deepmind_12_d"
    assert slugify_key("GT-1000") == "gt-1000"


def test_exact_then_lowercase_lookup():
    alias_map = {"Roland": "boss", "meris_llc": "meris"}
    assert normalize_key("Roland", alias_map).canonical_key == "boss"
    assert normalize_key("MERIS_LLC", alias_map).canonical_key == "meris"


def test_display_name_falls_back_to_canonical_value():
    result = normalize_key("meris_llc", {"meris_llc": "Meris"})
    assert result == NormalizedKey("meris", "Meris", "Meris")


def test_unmapped_key_is_its_own_canonical_form():
    result = normalize_key("Some Brand", {})
    assert result.normalized_id == "some_brand"
    assert result.canonical_name == "Some Brand"
    assert result.canonical_key is None


def test_alias_symmetry_for_access_music():
    table = make_table()
    for raw in ["access_music", "AccessMusic", "Access Music", "access"]:
        result = normalize_brand(raw, table)
        assert result.canonical_name == "Access Music"
        assert result.normalized_id == "access"


def test_device_display_name_scoped_by_brand():
    table = make_table()
    result = normalize_device("VirusTIDesk", table, "access")
    assert result.canonical_name == "Virus TI Desktop"
    assert result.normalized_id == "virus_ti_desktop"


def test_normalization_does_not_depend_on_call_order():
    table = make_table()
    first = normalize_brand("roland", table)
    for other in ["access_music", "Unknown", "BOSS", "virus"]:
        normalize_brand(other, table)
        normalize_device(other, table, "boss")
    assert normalize_brand("roland", table) == first
    assert first.canonical_name == "BOSS"


def test_empty_table_leaves_keys_untouched():
    table = empty_alias_table()
    assert normalize_brand("Chase Bliss", table) == NormalizedKey("chase_bliss", "Chase Bliss", None)
    assert normalize_device("Mood MKII", table, None).canonical_name == "Mood MKII"
