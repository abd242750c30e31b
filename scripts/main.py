#!/usr/bin/env python3
"""
Market Mogul - Virtual-Economy Investment Analyzer

Single entry point for the investment pipeline. Picks random tradeable items
from a game market, scores their price history and writes the best
high-volatility, high-return candidates for a budget.

Usage:
    # EVE Online (Jita), keep going until 10 tradeable items are found
    python scripts/main.py eve --budget 1b --items 10

    # OSRS, free-to-play items only, analyse a random sample of 50
    python scripts/main.py osrs --budget 2.5m --items 50 --f2p-only

    # Analyse every item in the catalog
    python scripts/main.py osrs --budget 50m

    # Show version
    python scripts/main.py --version

Environment variables (optional):
- MOGUL_BUDGET: default budget when --budget is omitted
- MOGUL_USER_AGENT: User-Agent sent to the market APIs
- MOGUL_OUTPUT_DIR: where <market>-results.json is written
- MOGUL_EVE_TYPES_FILE: path to the EVE SDE types.yaml

Output:
- results/<market>-results.json - Ranked recommendations and run metadata
"""
import sys
import argparse
import logging
import random

from investment_pipeline import __version__
from investment_pipeline.config import Config
from investment_pipeline.exceptions import InvalidInputError
from investment_pipeline.fetchers import EVEFetcher, OSRSFetcher
from investment_pipeline.filters import CandidateFilter
from investment_pipeline.pipeline import InvestmentPipeline, MODES
from investment_pipeline.summarizer import SummaryGenerator
from investment_pipeline.utils.budget import parse_item_count

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_fetcher(market_key: str):
    if market_key == 'eve':
        return EVEFetcher()
    return OSRSFetcher()


def print_report(market, result):
    """Print the top recommendations."""
    print(f"\n{'='*80}")
    print(f"TOP {min(3, len(result.recommendations))} INVESTMENT RECOMMENDATIONS - {market.display_name}")
    print(f"{'='*80}\n")

    for i, item in enumerate(result.recommendations[:3], 1):
        total_cost = item.current_price * item.units_affordable
        print(f"{i}. {item.name}")
        print(f"   Investment Score: {item.investment_score:.1f}/100")
        print(f"   Current Price: {item.current_price:,.0f} {market.currency}")
        print(f"   Can Buy: {item.units_affordable:,} units ({total_cost:,.0f} {market.currency})")
        print(f"   Price Change: {item.price_change_pct:+.2f}%")
        print(f"   Momentum: {item.momentum_pct:+.2f}%")
        print(f"   Volatility: {item.volatility_pct:.2f}% ({item.risk_level} risk)")
        if item.source_volume is not None:
            print(f"   Daily Volume: {item.source_volume:,.0f} ({item.volume_category})")
        print()

    print(f"Items checked: {result.total_checked}")
    print(f"Items analyzed: {result.total_analyzed}")
    print(f"Total time: {result.analysis_time}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Virtual-economy investment analyzer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/main.py eve --budget 1b --items 10
  python scripts/main.py osrs --budget 2.5m --items 50 --f2p-only
  python scripts/main.py osrs-classic --budget 500k --items 20 --seed 7
        """
    )

    parser.add_argument(
        'market',
        choices=sorted(Config.MARKETS),
        help='Market to analyse'
    )

    parser.add_argument(
        '--budget',
        type=str,
        help='Budget, e.g. 500k, 2.5m, 1b (default: $MOGUL_BUDGET or the market default)'
    )

    parser.add_argument(
        '--items',
        type=str,
        help='Items to sample or to find, depending on --mode (default: whole catalog)'
    )

    parser.add_argument(
        '--top',
        type=str,
        help='Number of recommendations to keep (default: market default)'
    )

    parser.add_argument(
        '--mode',
        choices=MODES,
        help="'sample' analyses N random items, 'until_found' keeps going until N pass the filters"
    )

    members = parser.add_mutually_exclusive_group()
    members.add_argument(
        '--include-members',
        dest='include_members',
        action='store_true',
        default=True,
        help='Include members-only items (default)'
    )
    members.add_argument(
        '--f2p-only',
        dest='include_members',
        action='store_false',
        help='Only free-to-play items (OSRS)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        help='Random seed for item selection'
    )

    parser.add_argument(
        '--delay',
        type=float,
        help='Seconds between API requests (default: market default)'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        help='Directory for the results file'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write log lines to this file'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Market Mogul v{__version__}'
    )

    args = parser.parse_args()

    if args.log_file:
        handler = logging.FileHandler(args.log_file)
        handler.setFormatter(logging.Formatter('%(asctime)s: %(message)s'))
        logging.getLogger().addHandler(handler)

    if not Config.validate():
        return 1

    if not args.output_dir:
        Config.setup_directories()

    market = Config.get_market(args.market)
    budget_input = args.budget or Config.DEFAULT_BUDGET or market.default_budget
    summarizer = SummaryGenerator(args.output_dir or Config.OUTPUT_DIR)
    pipeline = None

    try:
        item_count = parse_item_count(args.items) if args.items is not None else None
        fetcher = build_fetcher(market.key)
        pipeline = InvestmentPipeline(
            market=market,
            fetch=fetcher.fetch_history,
            budget=budget_input,
            top_n=args.top,
            candidate_filter=CandidateFilter(
                allowed_tiers=None if args.include_members else {False}
            ),
            rng=random.Random(args.seed),
            delay=args.delay
        )
        catalog = fetcher.load_catalog()
        result = pipeline.run(catalog, item_count=item_count, mode=args.mode)

        summarizer.write(market, summarizer.build(market, result, budget_input))
        print_report(market, result)

        if result.errors:
            print(f"\n[WARNING] Completed with {len(result.errors)} skipped item(s)")
        else:
            print("\n[SUCCESS] Analysis completed successfully!")
        return 0

    except InvalidInputError as e:
        print(f"\n[ERROR] {e}")
        return 1

    except KeyboardInterrupt:
        print("\n\n[INTERRUPTED] Analysis cancelled by user")
        return 130

    except Exception as e:
        print(f"\n[FATAL ERROR] Analysis failed: {e}")
        payload = summarizer.build_error(market, str(e), budget_input)
        if pipeline is not None and pipeline.result is not None:
            payload['partial'] = summarizer.build(market, pipeline.result, budget_input)
        summarizer.write(market, payload)
        return 1


if __name__ == "__main__":
    sys.exit(main())
