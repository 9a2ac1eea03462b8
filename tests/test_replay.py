from __future__ import annotations

from pathlib import Path

from bankin.scraper.replay import ReplayConfig, index_snapshots, run_replay
from bankin.scraper.sink import load_records


def _main_page(rows: int, start: int) -> str:
    body = "".join(
        f"<tr><td>Checking</td><td>Transaction {start + n}</td><td>{n}€</td></tr>"
        for n in range(rows)
    )
    return (
        "<html><body><div id='dvTable'><table>"
        "<tr><th>Account</th><th>Transaction</th><th>Amount</th></tr>"
        f"{body}</table></div></body></html>"
    )


def _frame_page(rows: int, start: int) -> str:
    body = "".join(
        f"<tr><td>Savings</td><td>Transaction {start + n}</td><td>{n}$</td></tr>"
        for n in range(rows)
    )
    return (
        "<html><body><table border='1'>"
        "<tr><th>Account</th><th>Transaction</th><th>Amount</th></tr>"
        f"{body}</table></body></html>"
    )


def _write(directory: Path, index: int, kind: str, html: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / f"page_{index:05d}_{kind}.html").write_text(html, encoding="utf-8")


def test_index_snapshots_ignores_unrelated_files(tmp_path: Path) -> None:
    _write(tmp_path, 1, "table", _main_page(1, 0))
    _write(tmp_path, 2, "frame", _frame_page(1, 50))
    (tmp_path / "page_notes.html").write_text("x", encoding="utf-8")

    found = index_snapshots(tmp_path)

    assert sorted(found) == [1, 2]


def test_replay_follows_batch_rule(tmp_path: Path) -> None:
    snapshots = tmp_path / "snapshots"
    _write(snapshots, 1, "table", _main_page(3, 0))
    _write(snapshots, 2, "frame", _frame_page(3, 3))
    _write(snapshots, 3, "table", _main_page(1, 6))
    _write(snapshots, 4, "table", _main_page(2, 7))

    summary = run_replay(
        ReplayConfig(snapshots_dir=snapshots, output=tmp_path / "replayed", batch_width=2, page_size=3)
    )

    assert summary["batches"] == 2
    assert summary["pages"] == 4
    assert summary["record_count"] == 9
    records = summary["records"]
    assert records[3] == {"account": "Savings", "transaction": 3, "amount": 0, "currency": "$"}
    assert load_records(tmp_path / "replayed.json") == records


def test_replay_stops_at_missing_snapshot(tmp_path: Path) -> None:
    _write(tmp_path, 1, "table", _main_page(2, 0))
    _write(tmp_path, 2, "table", _main_page(2, 2))
    _write(tmp_path, 4, "table", _main_page(2, 6))

    summary = run_replay(ReplayConfig(snapshots_dir=tmp_path, batch_width=2, page_size=2))

    assert summary["pages"] == 2
    assert summary["record_count"] == 4
    assert summary["output"] is None
