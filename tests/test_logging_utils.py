from bankin.scraper import config, logging_utils, utils


def test_scraper_event_label_and_phase(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._scraper_event("batch", phase="scheduler", step="start", first_page=101)

    assert events
    line = events[-1]
    assert line.startswith("[SCRAPER][BATCH] ")
    assert "phase='scheduler'" in line
    assert "first_page=101" in line


def test_scraper_event_phase_only(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._scraper_event(phase="sink", records=3)

    assert events == ["[SCRAPER][SINK] records=3"]


def test_scraper_event_carries_batch_and_page_scope(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._scraper_event("error", phase="worker", page_index=12, batch=0, error="io_error")

    assert events == ["[SCRAPER][ERROR][batch=0][page=12] error='io_error', phase='worker'"]


def test_scoped_line_matches_event_scope(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils.scoped_line("worker", "Just opened: https://example.test", page_index=3)
    logging_utils.scoped_line("batch", "All records have been retrieved!", batch=2)

    assert events == [
        "[WORKER][page=3] Just opened: https://example.test",
        "[BATCH][batch=2] All records have been retrieved!",
    ]


def test_run_logger_switches_files():
    utils.log_line("before the run")
    log_path = utils.setup_run_logger()
    utils.log_line("[BATCH][batch=0][page=4] data: 50 records")
    for handler in utils.LOGGER.handlers:
        handler.flush()

    assert log_path.parent == config.LOG_DIR
    assert log_path.name.startswith("scrape_")
    assert "[page=4] data: 50 records" in log_path.read_text(encoding="utf-8")
    assert "before the run" in config.LOG_FILE.read_text(encoding="utf-8")
    assert "before the run" not in log_path.read_text(encoding="utf-8")


def test_reset_logger_closes_run_file():
    utils.setup_run_logger()

    utils.reset_logger()

    assert utils.LOGGER.handlers == []


def test_format_duration():
    assert utils.format_duration(3.4561) == "3.456s"
    assert utils.format_duration(123.456) == "2m03.456s"
    assert utils.format_duration(3723.456) == "1h02m03.456s"
    assert utils.format_duration(-1) == "0.000s"
