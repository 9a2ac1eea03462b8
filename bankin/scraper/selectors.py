from __future__ import annotations

"""Selectors for the paginated transactions table."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TableSelectors:
    """Selector hints for the transactions page.

    The table is rendered either directly inside ``#dvTable`` or inside an
    iframe named ``fm``, and the page may instead raise an alert whose
    recovery is the "Reload Transactions" button. XPath expressions drive the
    in-page extraction; the CSS equivalents are used when parsing saved
    snapshots offline.
    """

    table_selector: str = "#dvTable>table"
    frame_selector: str = "iframe#fm"
    frame_name: str = "fm"
    frame_table_selector: str = "table[border]"
    reload_button: str = "#btnGenerate"
    main_rows_xpath: str = "//div[@id='dvTable']/table//tr[not(th)]"
    frame_rows_xpath: str = "//table[@border]//tr[not(th)]"
    main_rows_css: str = "div#dvTable > table tr"
    frame_rows_css: str = "table[border] tr"


DEFAULT_SELECTORS = TableSelectors()

__all__ = [
    "TableSelectors",
    "DEFAULT_SELECTORS",
]
