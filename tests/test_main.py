"""Tests for the command-line front end."""

import json

import main
from errors import BlockedError
from models import ListingRecord, PropertyTarget, SearchQuery


def _fake_scrape(records, calls):
    async def _scrape(target, settings):
        calls.append(target)
        return records

    return _scrape


def _records():
    return [
        ListingRecord(name="Pricey", price="€ 300", price_numeric=300, distance_numeric=0.5),
        ListingRecord(name="Cheap", price="€ 80", price_numeric=80, distance_numeric=4.0,
                      has_discount=True, original_price="€ 110"),
        ListingRecord(name="Middle", price="€ 150", price_numeric=150, distance_numeric=1.5),
    ]


def test_no_args_prints_usage(capsys):
    assert main.main([]) == 1
    out = capsys.readouterr().out
    assert "Usage: booking-scraper <city>" in out


def test_success_prints_and_writes_json(monkeypatch, tmp_path, capsys):
    calls = []
    monkeypatch.setattr(main, "scrape_listings", _fake_scrape(_records(), calls))
    output = tmp_path / "booking-results.json"

    code = main.main(["Paris", "--sort=price", "--order=desc", f"--output={output}"])

    assert code == 0
    assert calls == [SearchQuery(city="Paris")]
    out = capsys.readouterr().out
    assert "Found 3 hotels in Paris" in out
    assert out.index("1. Pricey") < out.index("2. Middle") < out.index("3. Cheap")
    assert "Price: € 80 (Original: € 110)" in out

    saved = json.loads(output.read_text(encoding="utf-8"))
    assert [h["name"] for h in saved] == ["Pricey", "Middle", "Cheap"]
    assert saved[2]["hasDiscount"] is True
    assert saved[0]["originalPrice"] is None


def test_discount_only(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(main, "scrape_listings", _fake_scrape(_records(), []))
    output = tmp_path / "out.json"

    assert main.main(["Paris", "--discount-only", "--output", str(output)]) == 0
    saved = json.loads(output.read_text(encoding="utf-8"))
    assert [h["name"] for h in saved] == ["Cheap"]


def test_url_and_dates_are_forwarded(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(main, "scrape_listings", _fake_scrape([], calls))

    main.main(["--url", "https://www.booking.com/searchresults.html?ss=Oslo",
               "--output", str(tmp_path / "a.json")])
    main.main(["Oslo", "--check-in", "2025-06-01", "--adults", "1",
               "--output", str(tmp_path / "b.json")])

    assert calls[0] == PropertyTarget(url="https://www.booking.com/searchresults.html?ss=Oslo")
    assert calls[1].check_in.isoformat() == "2025-06-01"
    assert calls[1].adults == 1


def test_scrape_failure_exits_nonzero(monkeypatch, tmp_path, capsys):
    async def _blocked(target, settings):
        raise BlockedError("https://www.booking.com/searchresults.html?ss=Paris")

    monkeypatch.setattr(main, "scrape_listings", _blocked)
    output = tmp_path / "booking-results.json"

    assert main.main(["Paris", "--output", str(output)]) == 1
    assert "Error: Blocked by anti-bot challenge" in capsys.readouterr().err
    assert not output.exists()


def test_unexpected_failure_exits_nonzero(monkeypatch, tmp_path, capsys):
    async def _crash(target, settings):
        raise RuntimeError("browser crashed")

    monkeypatch.setattr(main, "scrape_listings", _crash)

    assert main.main(["Paris", "--output", str(tmp_path / "out.json")]) == 1
    assert "Error: browser crashed" in capsys.readouterr().err
