"""Tests for core.cli - argument handling and output."""
from __future__ import annotations

import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from core import cli
from core.catalog import Category, CurrencyType, ItemType, League
from core.config import Config
from core.models import CurrencyRecord, ItemRecord, Snapshot
from data_sources.base_api import Unreachable

pytestmark = pytest.mark.unit


class FakeFetcher:
    def __init__(self):
        self.calls = []
        self.error = None
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True

    def fetch(self, league, dataset_type):
        self.calls.append((league, dataset_type))
        if self.error is not None:
            raise self.error
        if dataset_type.family.value == "currency":
            records = (
                CurrencyRecord.from_dict({"currencyTypeName": "Chaos Orb", "chaosEquivalent": 1.0}),
                CurrencyRecord.from_dict({"currencyTypeName": "Divine Orb", "chaosEquivalent": 180.0}),
            )
        else:
            records = (ItemRecord.from_dict({"name": "Gilded Scarab", "chaosValue": 4.5}),)
        return Snapshot(records=records, fetched_at=datetime.now().astimezone())


@pytest.fixture
def fetcher(monkeypatch):
    fake = FakeFetcher()
    monkeypatch.setattr(cli, "build_fetcher", lambda config: fake)
    monkeypatch.setattr(cli, "setup_logging", MagicMock())
    return fake


@pytest.fixture
def run_cli(tmp_path, fetcher, capsys):
    """Run the CLI with an isolated config and cache; return stdout."""
    base = ["--config", str(tmp_path / "config.json"), "--cache-dir", str(tmp_path / "cache")]

    def _run(*argv: str) -> str:
        cli.cli_main(list(argv) + base)
        return capsys.readouterr().out

    return _run


STANDARD_CURRENCY = ("-l", "Standard", "-c", "Currency", "-t", "Currency")


class TestHelpers:
    @pytest.mark.parametrize("value,expected", [
        (1.0, "1c"),
        (180.0, "180c"),
        (100.0, "100c"),
        (0.05, "0.05c"),
        (1234.5, "1234.5c"),
        (0.0031, "0.0031c"),
        (0.004, "0.004c"),
        (90000, "90000c"),
    ])
    def test_format_chaos(self, value, expected):
        assert cli.format_chaos(value) == expected

    def test_cheap_currency_keeps_its_price(self, capsys):
        snapshot = Snapshot(
            records=(
                CurrencyRecord(display_name="Scroll of Wisdom", value=0.0031),
                CurrencyRecord(display_name="Orb of Transmutation", value=0.004),
            ),
            fetched_at=datetime.now().astimezone(),
        )
        cli.show_snapshot("prices", snapshot, "")
        assert capsys.readouterr().out == "Scroll of Wisdom: 0.0031c\nOrb of Transmutation: 0.004c\n"

    def test_resolve_dataset_explicit(self, capsys):
        result = cli.resolve_dataset("Hardcore+Necropolis", "Item", "Scarab", League.STANDARD)
        assert result == (League.NECROPOLIS_HC, Category.ITEM, ItemType.SCARAB)
        assert capsys.readouterr().out == ""

    def test_resolve_dataset_defaults(self, capsys):
        result = cli.resolve_dataset("", "Weapons", None, League.AFFLICTION)
        assert result == (League.AFFLICTION, Category.CURRENCY, CurrencyType.CURRENCY)
        assert capsys.readouterr().out.splitlines() == [
            "Using default league: Affliction",
            "Using default category: Currency",
            "Using default currency type: Currency",
        ]

    def test_build_loader_overrides(self, temp_config, tmp_path):
        loader = cli.build_loader(temp_config, FakeFetcher(), threshold=3, cache_dir=tmp_path / "other")
        assert loader.cache.cache_dir == tmp_path / "other"
        assert loader.threshold_minutes == 3
        # config is left untouched
        assert temp_config.cache_dir == tmp_path / "cache"

    def test_build_loader_uses_config(self, temp_config, tmp_path):
        loader = cli.build_loader(temp_config, FakeFetcher())
        assert loader.cache.cache_dir == tmp_path / "cache"
        assert loader.threshold_minutes == 15

    def test_build_fetcher_tolerates_bad_timeouts(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"api": {"timeouts": {"connect": "fast"}}}), encoding="utf-8")

        with cli.build_fetcher(Config(config_file)) as fetcher:
            assert fetcher.timeout == (10, 10)

    def test_parser_defaults(self):
        args = cli.build_parser().parse_args([])
        assert args.operation == ""
        assert args.search == ""
        assert args.threshold is None
        assert args.debug is False


class TestList:
    def test_categories(self, run_cli, fetcher):
        out = run_cli("list", "-q", "categories")
        assert out == (
            "DEFAULT CATEGORY: Currency\n\n"
            "Valid Categories\n"
            "================\n"
            "Currency\n"
            "Item\n"
        )
        assert fetcher.calls == []

    def test_leagues(self, run_cli):
        lines = run_cli("list", "-q", "leagues").splitlines()
        assert lines[0] == "DEFAULT LEAGUE: Necropolis"
        assert lines[2] == "Valid Leagues"
        assert lines[4:] == League.names()

    def test_currency_and_item_types(self, run_cli):
        assert run_cli("list", "-q", "currency-types").splitlines()[-2:] == ["Currency", "Fragment"]

        lines = run_cli("list", "-q", "item-types").splitlines()
        assert lines[0] == "DEFAULT ITEM TYPE: Tattoo"
        assert lines[2] == "Valid Item Types"
        assert "UniqueJewel" in lines

    @pytest.mark.parametrize("query", ["bogus", ""])
    def test_invalid_query(self, run_cli, fetcher, query):
        argv = ["list"] + (["-q", query] if query else [])
        assert run_cli(*argv) == f"Invalid query: {query}\n"
        assert fetcher.calls == []


class TestPrices:
    def test_invalid_operation(self, run_cli, fetcher):
        assert run_cli("frobnicate") == "Invalid operation: frobnicate\n"
        assert fetcher.calls == []

    def test_all_defaults(self, run_cli, fetcher):
        out = run_cli()
        assert out.splitlines() == [
            "Using default league: Necropolis",
            "Using default category: Currency",
            "Using default currency type: Currency",
            "Chaos Orb: 1c",
            "Divine Orb: 180c",
        ]
        assert fetcher.calls == [(League.NECROPOLIS, CurrencyType.CURRENCY)]
        assert fetcher.closed

    def test_search(self, run_cli):
        assert run_cli("prices", *STANDARD_CURRENCY, "-s", "divine") == "Divine Orb: 180c\n"

    def test_no_matches(self, run_cli):
        assert run_cli("prices", *STANDARD_CURRENCY, "-s", "zzz") == "No matches for 'zzz'\n"

    def test_item_type_default(self, run_cli, fetcher):
        out = run_cli("prices", "-l", "Standard", "-c", "Item", "-t", "Sword")
        assert out.splitlines() == [
            "Using default item type: Tattoo",
            "Gilded Scarab: 4.5c",
        ]
        assert fetcher.calls == [(League.STANDARD, ItemType.TATTOO)]

    def test_second_run_served_from_cache(self, run_cli, fetcher):
        run_cli("prices", *STANDARD_CURRENCY)
        fetcher.error = Unreachable("offline")

        assert run_cli("prices", *STANDARD_CURRENCY, "-s", "chaos") == "Chaos Orb: 1c\n"
        assert len(fetcher.calls) == 1

    def test_no_data(self, run_cli, fetcher):
        fetcher.error = Unreachable("offline")
        assert run_cli("prices", *STANDARD_CURRENCY) == "No data to show\n"

    def test_stale_cache_shown_when_refresh_fails(self, run_cli, fetcher):
        run_cli("prices", *STANDARD_CURRENCY)
        fetcher.error = Unreachable("offline")

        # threshold of zero minutes makes every cached snapshot stale
        out = run_cli("prices", *STANDARD_CURRENCY, "--threshold", "0")
        assert out == "Chaos Orb: 1c\nDivine Orb: 180c\n"
        assert len(fetcher.calls) == 2


class TestRawOutput:
    def test_prices_raw_dumps_every_record(self, run_cli):
        out = run_cli("prices-raw", *STANDARD_CURRENCY, "-s", "divine")
        assert json.loads(out) == [
            {"currencyTypeName": "Chaos Orb", "chaosEquivalent": 1.0},
            {"currencyTypeName": "Divine Orb", "chaosEquivalent": 180.0},
        ]

    def test_data_dumps_snapshot(self, run_cli):
        data = json.loads(run_cli("data", "-l", "Standard", "-c", "Item", "-t", "Scarab"))
        assert data["lines"] == [{"name": "Gilded Scarab", "chaosValue": 4.5}]
        assert datetime.fromisoformat(data["updated"]).tzinfo is not None

    def test_raw_without_data(self, run_cli, fetcher):
        fetcher.error = Unreachable("offline")
        assert run_cli("prices-raw", *STANDARD_CURRENCY) == "No data to show\n"


def test_cli_main_sets_up_logging(run_cli):
    run_cli("list", "-q", "leagues", "--debug")
    cli.setup_logging.assert_called_once_with(debug=True)
