"""
Command-line interface for exilian.

Provides print utilities and the CLI entry point.
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Type

from core.catalog import (
    CatalogEnum,
    Category,
    CurrencyType,
    DatasetType,
    ItemType,
    League,
    TYPES_BY_CATEGORY,
)
from core.config import Config
from core.dataset_loader import DatasetLoader
from core.logging_setup import setup_logging
from core.matcher import search
from core.models import PriceRecord, Snapshot
from core.snapshot_cache import SnapshotCache
from data_sources.pricing.poe_ninja import PoeNinjaFetcher

logger = logging.getLogger(__name__)

PRICE_OPERATIONS = ("prices", "prices-raw", "data")
DEFAULT_OPERATION = "prices"

# list query -> (enumeration, label used in headings)
LIST_QUERIES = {
    "categories": (Category, "Category"),
    "leagues": (League, "League"),
    "currency-types": (CurrencyType, "Currency Type"),
    "item-types": (ItemType, "Item Type"),
}

TYPE_LABELS = {
    Category.CURRENCY: "currency type",
    Category.ITEM: "item type",
}


def format_chaos(value: float) -> str:
    """Format a chaos value at full precision, dropping a trailing ".0" (1.0 -> "1c", 0.0031 -> "0.0031c")."""
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text}c"


def print_catalog(enum_cls: Type[CatalogEnum], label: str, default: Optional[CatalogEnum] = None) -> None:
    """Print every valid value of an enumeration, default first."""
    default = default if default is not None else enum_cls.default()
    title = f"Valid {label}s" if not label.endswith("y") else f"Valid {label[:-1]}ies"

    print(f"DEFAULT {label.upper()}: {default.value}\n")
    print(title)
    print("=" * len(title))
    for variant in enum_cls:
        print(variant.value)


def print_prices(records: Sequence[PriceRecord], query: str = "") -> None:
    """Print one "name: value" line per record."""
    if not records:
        print(f"No matches for '{query}'")
        return
    for record in records:
        print(f"{record.display_name}: {format_chaos(record.value)}")


def print_raw(snapshot: Snapshot) -> None:
    """Dump every record of the snapshot as a JSON array."""
    print(json.dumps([record.to_dict() for record in snapshot.records], ensure_ascii=False))


def print_data(snapshot: Snapshot) -> None:
    """Dump the whole snapshot as a JSON object."""
    print(json.dumps(snapshot.to_dict(), ensure_ascii=False))


def show_snapshot(operation: str, snapshot: Snapshot, query: str = "") -> None:
    """Render a loaded snapshot for one of the price operations."""
    if snapshot.is_empty:
        print("No data to show")
    elif operation == "prices":
        print_prices(search(snapshot, query), query)
    elif operation == "prices-raw":
        print_raw(snapshot)
    elif operation == "data":
        print_data(snapshot)


def resolve_dataset(
    league_str: Optional[str],
    category_str: Optional[str],
    type_str: Optional[str],
    default_league: League,
) -> tuple[League, Category, DatasetType]:
    """
    Validate the league/category/type arguments, substituting defaults.

    Prints a notice for every default that was used.
    """
    league = League.from_name(league_str)
    if league is None:
        league = default_league
        print(f"Using default league: {league.value}")

    found, category = Category.from_name_or_default(category_str)
    if not found:
        print(f"Using default category: {category.value}")

    found, dataset_type = TYPES_BY_CATEGORY[category].from_name_or_default(type_str)
    if not found:
        print(f"Using default {TYPE_LABELS[category]}: {dataset_type.value}")

    return league, category, dataset_type


def build_loader(
    config: Config,
    fetcher: PoeNinjaFetcher,
    threshold: Optional[float] = None,
    cache_dir: Optional[Path] = None,
) -> DatasetLoader:
    """Wire the cache store and fetcher into a loader; arguments override config."""
    cache = SnapshotCache(cache_dir if cache_dir is not None else config.cache_dir)
    return DatasetLoader(
        cache=cache,
        fetcher=fetcher,
        threshold_minutes=threshold if threshold is not None else config.threshold_minutes,
    )


def build_fetcher(config: Config) -> PoeNinjaFetcher:
    return PoeNinjaFetcher(
        base_url=config.base_url,
        user_agent=config.user_agent,
        timeout=config.get_api_timeouts(),
        connect_retries=config.connect_retries,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exilian",
        description="poe.ninja price lookup with a local snapshot cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  exilian                                   # Currency prices, default league
  exilian prices -s divine                  # Fuzzy search currency names
  exilian prices -c Item -t Scarab -s gild  # Search an item overview
  exilian prices-raw -c Item -t Oil         # Raw JSON lines
  exilian list -q leagues                   # Valid leagues
        """
    )

    parser.add_argument("operation", nargs="?", default="",
                        help="[prices(default), prices-raw, data, list]")
    parser.add_argument("-q", "--query", default="",
                        help="Required for 'list' operation [categories, leagues, currency-types, item-types]")
    parser.add_argument("-c", "--category", default="", help="[Currency, Item]")
    parser.add_argument("-t", "--type", dest="type_", default="", help="Subcategory of CATEGORY")
    parser.add_argument("-s", "--search", default="", help="Search string")
    parser.add_argument("-l", "--league", default="", help="League")
    parser.add_argument("--threshold", type=float, default=None,
                        help="Minutes a cached snapshot stays fresh (default: from config, 15)")
    parser.add_argument("--cache-dir", type=Path, default=None, help="Snapshot cache directory")
    parser.add_argument("--config", type=Path, default=None, help="Config file (default: ~/.exilian/config.json)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def run(args: argparse.Namespace) -> None:
    """Execute one parsed command."""
    operation = args.operation or DEFAULT_OPERATION

    if operation == "list":
        entry = LIST_QUERIES.get(args.query)
        if entry is None:
            print(f"Invalid query: {args.query}")
            return
        enum_cls, label = entry
        default = Config(args.config).league if enum_cls is League else None
        print_catalog(enum_cls, label, default)
        return

    if operation not in PRICE_OPERATIONS:
        print(f"Invalid operation: {operation}")
        return

    config = Config(args.config)
    league, _category, dataset_type = resolve_dataset(
        args.league, args.category, args.type_, config.league
    )

    with build_fetcher(config) as fetcher:
        loader = build_loader(config, fetcher, args.threshold, args.cache_dir)
        snapshot = loader.load(league, dataset_type)

    show_snapshot(operation, snapshot, args.search)


def cli_main(argv: Optional[List[str]] = None) -> None:
    """Command-line interface entry point. Always exits with status 0."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug)
    logger.debug(f"exilian invoked with {args}")

    run(args)


if __name__ == "__main__":
    cli_main()
