import unittest

from mididb.registry.merger import apply_device_defaults, merge_devices
from mididb.registry.standardizer import standardize_device


def make_device(brand="Acme", name="Widget", **fields):
    return standardize_device(fields, brand, name)


class TestMergeDevices(unittest.TestCase):
    def test_longer_cc_list_wins_without_concatenation(self):
        device_a = make_device(cc=[{"name": "A"}, {"name": "B"}, {"name": "C"}])
        device_b = make_device(cc=[{"name": "Z"}])
        merged = merge_devices(device_a, device_b)
        self.assertEqual(len(merged["cc"]), 3)
        self.assertEqual(merged["cc"], device_a["cc"])

    def test_longer_secondary_list_wins(self):
        device_a = make_device(nrpn=[{"msb": 1, "lsb": 1}])
        device_b = make_device(nrpn=[{"msb": 1, "lsb": 1}, {"msb": 1, "lsb": 2}])
        merged = merge_devices(device_a, device_b)
        self.assertEqual(merged["nrpn"], device_b["nrpn"])

    def test_tie_keeps_primary(self):
        device_a = make_device(cc=[{"name": "Primary"}])
        device_b = make_device(cc=[{"name": "Secondary"}])
        merged = merge_devices(device_a, device_b)
        self.assertEqual(merged["cc"][0]["name"], "Primary")

    def test_empty_side_never_wins(self):
        device_a = make_device()
        device_b = make_device(pc=[{"name": "Preset"}])
        merged = merge_devices(device_a, device_b)
        self.assertEqual(len(merged["pc"]), 1)

    def test_primary_scalars_override_secondary(self):
        device_a = make_device(brand="Primary Brand", midi_in="5-pin DIN")
        device_b = make_device(brand="Secondary Brand", midi_in="TRS", midi_clock=True)
        merged = merge_devices(device_a, device_b)
        self.assertEqual(merged["brand"], "Primary Brand")
        self.assertEqual(merged["midi_in"], "5-pin DIN")
        # primary carries a present (defaulted) False, which still wins
        self.assertIs(merged["midi_clock"], False)

    def test_longer_channel_instructions_win(self):
        device_a = make_device(midi_channel={"instructions": "short"})
        device_b = make_device(midi_channel={"instructions": "a much longer text"})
        merged = merge_devices(device_a, device_b)
        self.assertEqual(merged["midi_channel"]["instructions"], "a much longer text")
        # inputs are untouched
        self.assertEqual(device_a["midi_channel"]["instructions"], "short")

    def test_defaults_reapplied(self):
        merged = merge_devices({"cc": [{"name": "A"}]}, {"midi_in": None})
        self.assertEqual(merged["phantom_power"], "None")
        self.assertEqual(merged["midi_channel"], {"instructions": ""})
        self.assertEqual(merged["nrpn"], [])
        self.assertEqual(merged["pc"], [])
        self.assertEqual(merged["midi_in"], "")


def test_non_text_channel_instructions_do_not_break_merge():
    device_a = make_device(midi_channel={"instructions": 5}, cc=[{"name": "a"}])
    device_b = make_device(midi_channel={"instructions": "text"})
    assert device_a["midi_channel"] == {"instructions": "5"}
    merged = merge_devices(device_a, device_b)
    assert merged["midi_channel"] == {"instructions": "text"}

    # records built by hand skip the standardizer
    raw_primary = {"midi_channel": {"instructions": ["set", "channel"]}}
    merged = merge_devices(raw_primary, {"midi_channel": "omni"})
    assert merged["midi_channel"] == {"instructions": ""}


def test_apply_device_defaults_fills_missing_fields():
    record = apply_device_defaults({"brand": "Acme"})
    assert record["midi_thru"] is False
    assert record["instructions"] == ""
    assert record["cc"] == []


if __name__ == "__main__":
    unittest.main()
