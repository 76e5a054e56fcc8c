"""
Spreadsheet export for scraped listings.
"""

import io
from typing import List

import pandas as pd

from .base import ListingRecord

SHEET_NAME = "Publications"

# Header order is part of the export contract
EXPORT_COLUMNS = [
    ("Title", "title"),
    ("Price", "price"),
    ("URL", "url"),
    ("Location", "location"),
    ("Phone", "phone"),
    ("Description", "description"),
    ("Name", "author_name"),
]


def listings_to_frame(listings: List[ListingRecord]) -> pd.DataFrame:
    """One row per listing, in input order, with the fixed seven columns."""
    rows = [
        {header: getattr(listing, attr) for header, attr in EXPORT_COLUMNS}
        for listing in listings
    ]
    return pd.DataFrame(rows, columns=[header for header, _ in EXPORT_COLUMNS])


def export_to_excel(listings: List[ListingRecord]) -> bytes:
    """Render listings as an .xlsx workbook and return its bytes."""
    buffer = io.BytesIO()
    df = listings_to_frame(listings)
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
    return buffer.getvalue()


def save_to_excel(listings: List[ListingRecord], out_path: str) -> int:
    """Write listings to an .xlsx file; returns the number of rows written."""
    with open(out_path, "wb") as fh:
        fh.write(export_to_excel(listings))
    return len(listings)
