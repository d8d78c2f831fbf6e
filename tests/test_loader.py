"""
Tests for the dataset loader.
"""

import csv

import pytest

from stormimpact.loader import (DatasetError, load_canonical_events, load_events,
                                load_magnitude_codes)


class TestLoadEvents:
    """Reading the compressed storm event file."""

    def test_loads_every_row(self, events_csv):
        events = load_events(events_csv)
        assert len(events) == 9
        assert [e.event_id for e in events] == list(range(9))

    def test_converts_fields(self, events_csv):
        e = load_events(events_csv)[1]
        assert e.year == 1997
        assert e.event_type == "TSTM WIND"
        assert e.fatalities == 1
        assert e.injuries == 2
        assert e.property_damage_magnitude == 2.5
        assert e.property_damage_code == "K"
        assert e.crop_damage_magnitude == 0.0
        assert e.crop_damage_code == ""

    def test_keeps_raw_label_untouched(self, events_csv):
        e = load_events(events_csv)[3]
        assert e.event_type == " flash flood "
        assert e.canonical_type is None

    def test_unparseable_date_gives_no_year(self, events_csv, caplog):
        with caplog.at_level("WARNING"):
            events = load_events(events_csv)
        assert events[4].year is None
        assert "unparseable begin date" in caplog.text

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Input not found"):
            load_events(str(tmp_path / "nope.csv.bz2"))

    def test_missing_column(self, tmp_path):
        path = tmp_path / "events.csv"
        path.write_text("BGN_DATE,EVTYPE\n1/1/2000 0:00:00,HAIL\n", encoding="utf-8")
        with pytest.raises(DatasetError, match="Missing required column"):
            load_events(str(path))

    def test_non_numeric_impact_is_a_parse_failure(self, tmp_path):
        path = tmp_path / "events.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["BGN_DATE", "EVTYPE", "FATALITIES", "INJURIES",
                        "PROPDMG", "PROPDMGEXP", "CROPDMG", "CROPDMGEXP"])
            w.writerow(["1/1/2000 0:00:00", "HAIL", "many", "0", "0", "", "0", ""])
        with pytest.raises(DatasetError, match="FATALITIES"):
            load_events(str(path))

    @pytest.mark.parametrize("fatalities, injuries, column", [
        ("1.7", "0", "FATALITIES"),
        ("0", "-2", "INJURIES"),
    ])
    def test_counts_must_be_whole_and_non_negative(self, tmp_path, fatalities, injuries, column):
        path = tmp_path / "events.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["BGN_DATE", "EVTYPE", "FATALITIES", "INJURIES",
                        "PROPDMG", "PROPDMGEXP", "CROPDMG", "CROPDMGEXP"])
            w.writerow(["1/1/2000 0:00:00", "HAIL", fatalities, injuries, "0", "", "0", ""])
        with pytest.raises(DatasetError, match=column):
            load_events(str(path))

    def test_whole_float_counts_accepted(self, tmp_path):
        path = tmp_path / "events.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["BGN_DATE", "EVTYPE", "FATALITIES", "INJURIES",
                        "PROPDMG", "PROPDMGEXP", "CROPDMG", "CROPDMGEXP"])
            w.writerow(["1/1/2000 0:00:00", "HAIL", "2.0", "3", "0", "", "0", ""])
        [e] = load_events(str(path))
        assert e.fatalities == 2
        assert isinstance(e.fatalities, int)

    def test_column_aliases_and_blank_numbers(self, tmp_path):
        path = tmp_path / "events.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["begin_date", "event_type", "deaths", "injuries",
                        "property_damage", "property_damage_code", "crop_damage", "crop_damage_code"])
            w.writerow(["2/2/2002 12:30:00", "Hail", "", "3", "1.5", "M", "", ""])
        [e] = load_events(str(path))
        assert e.year == 2002
        assert e.fatalities == 0
        assert e.injuries == 3
        assert e.property_damage_code == "M"
        assert e.crop_damage_magnitude == 0.0


class TestLoadMagnitudeCodes:

    def test_reads_codes_as_text(self, codes_csv):
        table = load_magnitude_codes(codes_csv)
        assert {(mc.code, mc.multiplier) for mc in table} == {
            ("", 0.0), ("K", 1e3), ("M", 1e6), ("B", 1e9)}

    def test_digit_codes_stay_strings(self, tmp_path):
        path = tmp_path / "codes.csv"
        path.write_text("code,multiplier\n0,1\n5,100000\n", encoding="utf-8")
        table = load_magnitude_codes(str(path))
        assert [mc.code for mc in table] == ["0", "5"]

    def test_duplicate_codes_rejected(self, tmp_path):
        path = tmp_path / "codes.csv"
        path.write_text("code,multiplier\nK,1000\nK,1000\n", encoding="utf-8")
        with pytest.raises(DatasetError, match="Duplicate"):
            load_magnitude_codes(str(path))

    def test_bad_multiplier_rejected(self, tmp_path):
        path = tmp_path / "codes.csv"
        path.write_text("code,multiplier\nK,thousand\n", encoding="utf-8")
        with pytest.raises(DatasetError, match="non-numeric"):
            load_magnitude_codes(str(path))

    def test_blank_multiplier_rejected(self, tmp_path):
        path = tmp_path / "codes.csv"
        path.write_text("code,multiplier\nM,1e6\nK,\n", encoding="utf-8")
        with pytest.raises(DatasetError, match=r"Blank multiplier.*'K'"):
            load_magnitude_codes(str(path))


class TestLoadCanonicalEvents:

    def test_uppercases_trims_and_dedupes(self, event_types_txt, canonical):
        assert load_canonical_events(event_types_txt) == canonical

    def test_empty_list_rejected(self, tmp_path):
        path = tmp_path / "types.txt"
        path.write_text("\n   \n", encoding="utf-8")
        with pytest.raises(DatasetError):
            load_canonical_events(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_canonical_events(str(tmp_path / "types.txt"))
