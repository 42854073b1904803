"""
optscore command line

Scores a chain snapshot stored as JSON and prints the result as JSON.

Snapshot shapes accepted:
    {"symbol": "SPY", "spot_price": 455.0, "as_of": "2026-01-20T15:30:00", "options": [...]}
    {"data": {"symbol": "SPY", "current_price": 455.0, "options": [...]}}   (delayed-quote export)

Usage:
    optscore scan snapshot.json --strategy long --today 2026-01-20
    optscore recommend snapshot.json --direction BULL --target-dte 30 --closes closes.json
    python -m optscore scan snapshot.json --profile relaxed --log-level DEBUG
"""

import argparse
import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Sequence

from loguru import logger

from optscore.config.loader import load_config
from optscore.config.scoring_config import ScoringConfig
from optscore.core.normalizer import normalize_chain
from optscore.exceptions import ChainNormalizationError, ConfigurationError
from optscore.models.chain import Chain
from optscore.scanner import scan_chain
from optscore.strategy_builder.recommender import recommend_strategies
from optscore.utils.log_config import setup_logging
from optscore.volatility.realized import iv_realized_ratio, realized_volatility
from optscore.volatility.term_structure import get_term_ratio


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="optscore",
        description="Options chain quality scoring",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("snapshot", type=Path, help="Chain snapshot JSON file")
    common.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Reference date for days-to-expiry (default: snapshot as_of date)",
    )
    common.add_argument("--config", type=Path, default=None, help="YAML scoring config")
    common.add_argument(
        "--profile",
        choices=["strict", "relaxed"],
        default=None,
        help="Named scoring profile (overrides config file)",
    )
    common.add_argument(
        "--iv-rv",
        type=float,
        default=None,
        help="Implied / realized volatility ratio",
    )
    common.add_argument(
        "--closes",
        type=Path,
        default=None,
        help="JSON list of daily closes (oldest first) to derive the IV/RV ratio",
    )
    common.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    common.add_argument("--log-file", type=Path, default=None, help="Optional log file")

    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", parents=[common], help="Score single contracts")
    scan.add_argument("--strategy", choices=["long", "short"], default="long")
    scan.add_argument("--dte-min", type=int, default=None)
    scan.add_argument("--dte-max", type=int, default=None)
    scan.add_argument("--strike-range", type=float, default=None, help="Strike range around spot (0.25 = 25%%)")
    scan.add_argument("--min-volume", type=int, default=None)
    scan.add_argument("--max-spread", type=float, default=None, help="Max bid/ask spread pct (0.10 = 10%%)")
    scan.add_argument("--min-delta", type=float, default=None)
    scan.add_argument("--max-delta", type=float, default=None)
    scan.add_argument("--direction", choices=["all", "call", "put"], default=None)
    scan.add_argument("--day-trade", action="store_true", help="Use day-trade weights")

    recommend = sub.add_parser("recommend", parents=[common], help="Recommend a spread strategy")
    recommend.add_argument("--direction", choices=["BULL", "BEAR"], type=str.upper, default="BULL")
    recommend.add_argument("--target-dte", type=int, default=30)
    recommend.add_argument("--earnings-days", type=int, default=None, help="Days until next earnings")

    return parser.parse_args(argv)


def load_snapshot(path: Path, today: Optional[date] = None) -> Chain:
    """
    Read a JSON snapshot and normalize it into a Chain.

    Raises:
        ValueError: If the file lacks a spot price or options list
    """
    with open(path, "r") as f:
        payload = json.load(f)

    data = payload.get("data", payload) if isinstance(payload, dict) else {}
    options = data.get("options")
    spot = data.get("spot_price", data.get("current_price"))
    if options is None or spot is None:
        raise ValueError(f"{path} must contain 'options' and 'spot_price' (or 'current_price')")

    as_of = None
    raw_as_of = data.get("as_of") or data.get("timestamp")
    if raw_as_of:
        as_of = datetime.fromisoformat(str(raw_as_of).replace("Z", "+00:00"))

    if today is None:
        today = as_of.date() if as_of is not None else date.today()

    return normalize_chain(
        options,
        spot_price=float(spot),
        today=today,
        symbol=str(data.get("symbol", "")),
        as_of=as_of,
    )


def resolve_iv_rv(args: argparse.Namespace, chain: Chain, config: ScoringConfig) -> Optional[float]:
    """IV/RV ratio from --iv-rv, or from --closes against the chain's near-tenor IV."""
    if args.iv_rv is not None:
        return args.iv_rv
    if args.closes is None:
        return None

    with open(args.closes, "r") as f:
        closes = json.load(f)

    rv = realized_volatility(closes)
    iv = get_term_ratio(chain, chain.spot_price, config).iv30
    ratio = iv_realized_ratio(iv, rv)
    logger.info(f"Realized vol={rv}, near IV={iv}, IV/RV={ratio}")
    return ratio


def _scan_filters(args: argparse.Namespace, config: ScoringConfig):
    filters = config.scan_filters
    overrides = {
        "dte_min": args.dte_min,
        "dte_max": args.dte_max,
        "strike_range_pct": args.strike_range,
        "min_volume": args.min_volume,
        "max_spread_pct": args.max_spread,
        "min_delta": args.min_delta,
        "max_delta": args.max_delta,
        "direction": args.direction,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(filters, key, value)

    errors = config.validate()
    if errors:
        raise ConfigurationError("Invalid scan filters: " + "; ".join(errors), errors=errors)
    return filters


def run(args: argparse.Namespace) -> dict[str, Any]:
    """Execute one command and return its JSON-ready result."""
    config = load_config(args.config, profile=args.profile)
    chain = load_snapshot(args.snapshot, args.today)
    logger.info(f"Loaded {chain}")
    for row in chain.expiry_summary().iter_rows(named=True):
        logger.debug(
            f"  {row['expiration']} ({row['dte']}d): {row['contracts']} contracts, "
            f"{row['calls']}C/{row['puts']}P, vol={row['volume']}, oi={row['open_interest']}"
        )

    ratio = resolve_iv_rv(args, chain, config)

    if args.command == "scan":
        result = scan_chain(
            chain,
            args.strategy,
            filters=_scan_filters(args, config),
            config=config,
            iv_realized_ratio=ratio,
            day_trade=args.day_trade,
        )
    else:
        result = recommend_strategies(
            chain,
            args.direction,
            target_dte=args.target_dte,
            iv_realized_ratio=ratio,
            days_until_earnings=args.earnings_days,
            config=config,
        )
    return result.to_dict()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        output = run(args)
    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except (ChainNormalizationError, ConfigurationError) as e:
        logger.error(f"❌ {e}")
        return 1
    except (ValueError, json.JSONDecodeError) as e:
        logger.error(f"❌ Invalid input: {e}")
        return 1

    print(json.dumps(output, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
