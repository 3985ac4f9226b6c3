import pytest

from credit_review.errors import NoCompanyDataError
from credit_review.records import (
    Company,
    build_records,
    filter_company_records,
    identifier_text,
)


def test_build_records_trims_keys_and_normalizes_values():
    records = build_records([{" ID ": "2412", "Year ": "2021", " STD": "1,000", "TIE": "15%"}])
    assert len(records) == 1
    record = records[0]
    assert record.company_id == "2412"
    assert record.year == 2021
    assert record.get("STD") == 1000.0
    assert record.get("TIE") == pytest.approx(0.15)


def test_build_records_drops_rows_without_identifier():
    rows = [
        {"ID": "", "Year": "2021", "STD": "100"},
        {"Year": "2020", "STD": "50"},
        {"ID": "-", "Year": "2019"},
        {"ID": "2330", "Year": "2021"},
    ]
    records = build_records(rows)
    assert [r.company_id for r in records] == ["2330"]
    assert all(r.company_id for r in records)


def test_build_records_keeps_source_order():
    rows = [
        {"ID": "2412", "Year": "2022"},
        {"ID": "2330", "Year": "2020"},
        {"ID": "2412", "Year": "2019"},
    ]
    assert [(r.company_id, r.year) for r in build_records(rows)] == [
        ("2412", 2022),
        ("2330", 2020),
        ("2412", 2019),
    ]


def test_non_numeric_year_falls_back_to_zero():
    records = build_records([{"ID": "2412", "Year": "FY"}])
    assert records[0].year == 0


def test_identifier_text_matches_numeric_and_string_ids():
    assert identifier_text(2412.0) == "2412"
    assert identifier_text(2412) == "2412"
    assert identifier_text(" 2412 ") == "2412"
    assert identifier_text("AAPL") == "AAPL"


def test_filter_sorts_by_year_scenario_a():
    rows = [
        {"ID": "2412", "Year": "2021", "STD": "1,000"},
        {"ID": "2412", "Year": "2020", "STD": "500"},
    ]
    selected = filter_company_records(build_records(rows), "2412")
    assert [r.year for r in selected] == [2020, 2021]
    assert [r.get("STD") for r in selected] == [500.0, 1000.0]


def test_filter_accepts_numeric_target():
    records = build_records([{"ID": 2412, "Year": 2020}])
    assert len(filter_company_records(records, 2412)) == 1
    assert len(filter_company_records(records, "2412")) == 1


def test_filter_output_is_non_decreasing_for_any_order():
    years = [2018, 2022, 2019, 2021, 2020, 2019]
    records = build_records([{"ID": "1301", "Year": y} for y in years])
    selected = filter_company_records(records, "1301")
    assert [r.year for r in selected] == sorted(years)


def test_empty_selection_is_reported_scenario_b():
    records = build_records([{"ID": "", "Year": "2021", "STD": "100"}])
    assert records == []
    with pytest.raises(NoCompanyDataError):
        filter_company_records(records, "2412")


def test_company_from_dict_maps_english_name():
    company = Company.from_dict({"id": "2412", "name": "中華電信", "nameEn": "Chunghwa Telecom"})
    assert company.name_en == "Chunghwa Telecom"
    assert company.industry is None
    assert company.to_dict()["nameEn"] == "Chunghwa Telecom"


def test_record_values_are_read_only():
    record = build_records([{"ID": "2412", "Year": 2021, "STD": 500}])[0]
    with pytest.raises(TypeError):
        record.values["STD"] = 1
    assert record.get("STD") == 500
