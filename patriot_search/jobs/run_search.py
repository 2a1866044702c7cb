"""CLI to run a reconciled directory search or a duplicate check."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from patriot_search.core.config import ConfigError, get_settings, require_search_api_url
from patriot_search.etl.transform import duplicate_check_to_row, result_to_row
from patriot_search.matching.reconciler import build_reconciler

logger = logging.getLogger(__name__)


def run_search_job(
    *,
    business_name: Optional[str],
    address: Optional[str],
    category: Optional[str],
    service_type: Optional[str],
    keywords: Optional[str],
    only_with_incentives: bool,
) -> List[dict]:
    settings = get_settings()
    require_search_api_url(settings)

    if not any(value and value.strip() for value in (business_name, address, category, service_type, keywords)):
        raise ValueError("Search parameters are empty")

    outcome = build_reconciler(settings).search(
        business_name=business_name,
        address=address,
        category=category,
        service_type=service_type,
        keywords=keywords,
    )
    shown = outcome.with_incentives if only_with_incentives else outcome.results
    logger.info("Completed search: total=%d shown=%d", len(outcome.results), len(shown))
    return [result_to_row(result) for result in shown]


def run_check_place_job(*, place_id: str) -> dict:
    settings = get_settings()
    require_search_api_url(settings)
    if not settings.google_api_key:
        raise ConfigError("GOOGLE_API_KEY is required to fetch place details")

    result = build_reconciler(settings).check_place_id(place_id)
    logger.info("Checked place %s: outcome=%s", place_id, result.outcome.value)
    return duplicate_check_to_row(result)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search the Patriot Thanks directory")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Run a classified business search")
    search.add_argument("--business-name", dest="business_name", help="Business name, e.g. 'Olive Garden'")
    search.add_argument("--address", dest="address", help="Street address, 'City ST' or zip code")
    search.add_argument("--category", dest="category", help="Business category code, e.g. REST")
    search.add_argument("--service-type", dest="service_type", help="Incentive service type: VT, AD, FR or SP")
    search.add_argument("--keywords", dest="keywords", help="Free-text keywords")
    show_only_with_incentives = get_settings().show_only_with_incentives
    search.add_argument(
        "--only-with-incentives",
        dest="only_with_incentives",
        action=argparse.BooleanOptionalAction,
        default=show_only_with_incentives,
        help="Show only businesses offering incentives (default from SHOW_ONLY_WITH_INCENTIVES)",
    )
    search.add_argument(
        "--all",
        dest="only_with_incentives",
        action="store_false",
        default=show_only_with_incentives,
        help="Shorthand for --no-only-with-incentives",
    )

    check = subparsers.add_parser("check-place", help="Check whether a Google place is already listed")
    check.add_argument("place_id", help="Google place id")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)

    try:
        if args.command == "search":
            output = run_search_job(
                business_name=args.business_name,
                address=args.address,
                category=args.category,
                service_type=args.service_type,
                keywords=args.keywords,
                only_with_incentives=args.only_with_incentives,
            )
        else:
            output = run_check_place_job(place_id=args.place_id)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    except ValueError as exc:
        logger.error("%s", exc)
        raise SystemExit(2) from exc

    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
