"""
Tests for the spreadsheet export.
"""

import io

import pandas as pd

from scrapers.base import ListingRecord
from scrapers.export import SHEET_NAME, export_to_excel, listings_to_frame, save_to_excel

HEADER = ["Title", "Price", "URL", "Location", "Phone", "Description", "Name"]


def sample_listings():
    return [
        ListingRecord(
            title="Toyota Camry 2020", url="https://haraj.com.sa/1", price="55000 SAR",
            location="Riyadh", phone="0555 123 456", description="Clean car", author_name="Abu Fahad",
        ),
        ListingRecord(title="iPhone 15 Pro", url="https://haraj.com.sa/2"),
    ]


class TestExport:

    def test_frame_columns_and_order(self):
        df = listings_to_frame(sample_listings())

        assert list(df.columns) == HEADER
        assert list(df["Title"]) == ["Toyota Camry 2020", "iPhone 15 Pro"]
        assert df.iloc[0]["Name"] == "Abu Fahad"

    def test_workbook_round_trip(self):
        content = export_to_excel(sample_listings())

        df = pd.read_excel(io.BytesIO(content), sheet_name=SHEET_NAME, dtype=str, keep_default_na=False)

        assert list(df.columns) == HEADER
        assert len(df) == 2
        assert df.iloc[1]["Phone"] == "undefined"
        assert df.iloc[1]["Price"] == "N/A"

    def test_empty_export_still_has_header(self):
        df = pd.read_excel(io.BytesIO(export_to_excel([])), sheet_name=SHEET_NAME)

        assert list(df.columns) == HEADER
        assert len(df) == 0

    def test_save_to_excel(self, tmp_path):
        out = tmp_path / "publications.xlsx"

        rows = save_to_excel(sample_listings(), str(out))

        assert rows == 2
        assert out.exists()
