"""Smoke tests for the command line interface against the sample data."""

from pathlib import Path

import pytest
from rich.console import Console

from hopsearch import cli

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


@pytest.fixture
def console(monkeypatch):
    recording = Console(width=200, record=True)
    monkeypatch.setattr(cli, "console", recording)
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)
    return recording


def test_search_prints_itineraries(console):
    code = cli.main(
        [
            "--data-dir", str(DATA_DIR),
            "search", "DEL", "BOM",
            "--date", "2025-08-20",
            "--sort-price",
        ]
    )

    output = console.export_text()
    assert code == cli.EXIT_OK
    assert "6E201" in output
    assert "DEL -> HYD -> GOI -> BOM" in output
    assert "7 itineraries" in output


def test_search_with_filters(console):
    code = cli.main(
        [
            "--data-dir", str(DATA_DIR),
            "search", "del", "bom",
            "--at", "2025-08-20T06:00",
            "--seats", "2",
            "--max-hops", "1",
            "--carrier", "vistara",
        ]
    )

    output = console.export_text()
    assert code == cli.EXIT_OK
    assert "UK301+6E455" in output
    assert "1 itineraries" in output


def test_search_no_results(console):
    code = cli.main(
        ["--data-dir", str(DATA_DIR), "search", "DEL", "BOM", "--date", "2025-08-20", "--max-price", "100"]
    )
    assert code == cli.EXIT_OK
    assert "No itineraries found" in console.export_text()


def test_routes(console):
    code = cli.main(["--data-dir", str(DATA_DIR), "routes", "DEL", "BOM", "--hops", "2"])

    output = console.export_text()
    assert code == cli.EXIT_OK
    assert "DEL -> CCU -> MAA -> BOM" in output


@pytest.mark.parametrize(
    "argv",
    [
        ["search", "DEL", "DEL", "--date", "2025-08-20"],
        ["search", "DEL", "BOM", "--date", "2025-08-20", "--seats", "0"],
        ["search", "DEL", "BOM", "--date", "20-08-2025"],
        ["search", "DEL", "BOM"],
        ["routes", "DEL", "BOM", "--hops", "-1"],
        ["search", "DEL", "BOM", "--date", "2025-08-20", "--max-price", "nan"],
        ["search", "DEL", "BOM", "--date", "2025-08-20", "--max-price", "inf"],
        ["search", "DEL", "BOM", "--date", "2025-08-20", "--max-price", "snan"],
        ["search", "DEL", "BOM", "--at", "2025-08-20T06:00:00+00:00"],
    ],
)
def test_invalid_input_exits_with_status_2(console, argv):
    code = cli.main(["--data-dir", str(DATA_DIR)] + argv)
    assert code == cli.EXIT_INVALID_INPUT
    assert "Invalid input" in console.export_text()


def test_missing_data_exits_with_status_1(console, tmp_path):
    code = cli.main(["--data-dir", str(tmp_path), "search", "DEL", "BOM", "--date", "2025-08-20"])
    assert code == cli.EXIT_FAILURE


def test_routes_up_to(console):
    code = cli.main(["--data-dir", str(DATA_DIR), "routes", "DEL", "BOM", "--up-to", "1"])

    output = console.export_text()
    assert code == cli.EXIT_OK
    assert "DEL -> BOM" in output
    assert "DEL -> HYD -> BOM" in output


def test_routes_connecting_excludes_direct(console):
    code = cli.main(["--data-dir", str(DATA_DIR), "routes", "DEL", "BOM", "--connecting"])

    output = console.export_text()
    assert code == cli.EXIT_OK
    assert "DEL -> BLR -> MAA -> BOM" in output
    assert "DEL -> BOM " not in output
