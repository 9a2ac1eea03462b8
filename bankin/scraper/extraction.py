"""Row extraction for the transactions table.

Extraction runs in two steps. A small script evaluated inside the page (or
its sub-frame) collects the raw text of the first few cells of every row
matched by an XPath expression, in document order. The field rules below are
then applied in Python, so the same rules serve live pages and saved HTML
snapshots.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from bs4 import BeautifulSoup
from playwright.async_api import Frame, Page

from .error_codes import ErrorCode, PageLoadError

Record = Dict[str, Any]
CellRow = Sequence[Optional[str]]

# A capture written exactly like this yields an int instead of a string.
NUMERIC_GROUP_MARKER = r"(\d+)"


@dataclass(frozen=True)
class FieldSpec:
    """One output field read from a fixed (1-based) column of a row."""

    name: str
    column: int
    pattern: Optional[str] = None


TRANSACTION_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("account", 1),
    FieldSpec("transaction", 2, r"Transaction\s(\d+)"),
    FieldSpec("amount", 3, r"(\d+)"),
    FieldSpec("currency", 3, r"\d+([^0-9,\.]+)"),
)

ROW_CELLS_SCRIPT = """
({ xpath, columns }) => {
    const snapshot = document.evaluate(
        xpath, document, null, XPathResult.ORDERED_NODE_SNAPSHOT_TYPE, null
    );
    const rows = [];
    for (let i = 0; i < snapshot.snapshotLength; i++) {
        const row = snapshot.snapshotItem(i);
        const cells = [];
        for (let column = 1; column <= columns; column++) {
            const cell = document.evaluate(
                `td[${column}]`, row, null, XPathResult.FIRST_ORDERED_NODE_TYPE, null
            ).singleNodeValue;
            cells.push(cell ? (cell.textContent || cell.innerText || cell.value || '') : null);
        }
        rows.push(cells);
    }
    return rows;
}
"""


def extract_value(text: Optional[str], pattern: Optional[str] = None) -> Any:
    """Apply ``pattern`` to a cell's text.

    * missing cell (``None``) -> ``None``
    * no pattern -> the text unchanged
    * pattern on empty text -> ``None``
    * pattern without a match -> ``""``
    * pattern containing ``(\\d+)`` -> first group as ``int``
    """

    if text is None:
        return None
    if pattern is None:
        return text
    if not text:
        return None

    match = re.search(pattern, text)
    if match is None:
        return ""

    captured = match.group(1)
    if NUMERIC_GROUP_MARKER in pattern:
        return int(captured) if captured is not None else None
    return captured


def build_record(cells: CellRow, fields: Iterable[FieldSpec] = TRANSACTION_FIELDS) -> Record:
    """Build one record from a row's cell texts."""

    record: Record = {}
    for spec in fields:
        position = spec.column - 1
        text = cells[position] if 0 <= position < len(cells) else None
        record[spec.name] = extract_value(text, spec.pattern)
    return record


def records_from_cells(
    rows: Iterable[CellRow], fields: Sequence[FieldSpec] = TRANSACTION_FIELDS
) -> List[Record]:
    return [build_record(cells, fields) for cells in rows]


def _column_count(fields: Sequence[FieldSpec]) -> int:
    return max((spec.column for spec in fields), default=0)


async def extract_table(
    scope: Page | Frame,
    rows_xpath: str,
    fields: Sequence[FieldSpec] = TRANSACTION_FIELDS,
    *,
    page_index: Optional[int] = None,
) -> List[Record]:
    """Extract one record per row matched by ``rows_xpath`` inside ``scope``."""

    rows = await scope.evaluate(
        ROW_CELLS_SCRIPT, {"xpath": rows_xpath, "columns": _column_count(fields)}
    )
    if not isinstance(rows, list):
        raise PageLoadError(
            f"Row extraction returned {type(rows).__name__}, expected a list",
            code=ErrorCode.EXTRACTION,
            page_index=page_index,
        )
    return records_from_cells(rows, fields)


def cells_from_html(html: str, rows_css: str, columns: int) -> List[List[Optional[str]]]:
    """Collect cell texts from saved HTML, mirroring the in-page script."""

    soup = BeautifulSoup(html, "html5lib")
    rows: List[List[Optional[str]]] = []
    for row in soup.select(rows_css):
        if row.find("th", recursive=False) is not None:
            continue
        cells = row.find_all("td", recursive=False)
        rows.append(
            [cells[i].get_text() if i < len(cells) else None for i in range(columns)]
        )
    return rows


def records_from_html(
    html: str, rows_css: str, fields: Sequence[FieldSpec] = TRANSACTION_FIELDS
) -> List[Record]:
    return records_from_cells(cells_from_html(html, rows_css, _column_count(fields)), fields)


__all__ = [
    "Record",
    "FieldSpec",
    "TRANSACTION_FIELDS",
    "NUMERIC_GROUP_MARKER",
    "ROW_CELLS_SCRIPT",
    "extract_value",
    "build_record",
    "records_from_cells",
    "extract_table",
    "cells_from_html",
    "records_from_html",
]
