import pandas as pd
import pytest

from routesync.config.mapping_loader import get_live_export_headers, get_rps_header_aliases
from routesync.services.file_parser import (
    infer_file_type,
    load_live_export,
    parse_live_export,
    read_export,
)

HEADER = ["Vehicle Number", "Consigner Name", "Consignee  Name", "ETA", "Delay Time(HH:MM:SS)", "RPS No"]


def test_infer_file_type():
    assert infer_file_type("OnTrip.XLSX") == "xlsx"
    assert infer_file_type("export.csv") == "csv"
    assert infer_file_type("notes.txt") == "txt"


def test_mapping_config_loaded():
    headers = get_live_export_headers()
    assert headers["delay_time"] == "Delay Time(HH:MM:SS)"
    assert "rps no" in get_rps_header_aliases()["rps_no"]


def test_parse_live_export_maps_columns_and_defaults_missing():
    df = pd.DataFrame([
        HEADER,
        ["UP32AB1234", "LUCKNOW-11", "SAFEXPRESS AMBALA(AML11)", "NA;15/06/2024 09:00:00", "01:15:00", None],
        [None, None, None, None, None, None],
    ])
    [record] = parse_live_export(df)
    assert record.vehicle_number == "UP32AB1234"
    assert record.consignee_name == "SAFEXPRESS AMBALA(AML11)"
    assert record.delay_time == "01:15:00"
    assert record.rps_number == ""
    # columns absent from the export come back empty
    assert record.last_location == ""


def test_parse_live_export_empty_frame():
    assert parse_live_export(pd.DataFrame()) == []


def test_load_live_export_from_csv_bytes():
    content = (
        "Vehicle Number,Consigner Name,Consignee Name,Delay Time(HH:MM:SS)\n"
        "UP32AB1234,LUCKNOW-11,SAFEXPRESS AMBALA(AML11),01:15:00\n"
    ).encode("utf-8")
    [record] = load_live_export(content, "export.csv")
    assert record.consigner_name == "LUCKNOW-11"


def test_read_export_latin1_csv():
    content = "Vehicle Number,Last Location\nV1,Zürich\n".encode("latin-1")
    df = read_export(content, "csv")
    assert df.iloc[1, 1] == "Zürich"


def test_read_export_rejects_unknown_type():
    with pytest.raises(ValueError):
        read_export(b"", "pdf")
