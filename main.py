from bankin.scraper.run import _cli_entrypoint

if __name__ == "__main__":
    # Only --pages is read; e.g. ``python main.py --pages=100``.
    raise SystemExit(_cli_entrypoint())
