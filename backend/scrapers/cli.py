#!/usr/bin/env python3
"""
Command line runner for the listing scraper.

Usage:
    cd backend
    python -m scrapers.cli --url URL [--output out.xlsx]

Examples:
    python -m scrapers.cli --url https://haraj.com.sa/tags/cars
    python -m scrapers.cli --urls https://haraj.com.sa/tags/a,https://haraj.com.sa/tags/b
    python -m scrapers.cli --homepage https://haraj.com.sa --limit 50 --output publications.xlsx
"""

import asyncio
import argparse
import logging
import json

from scrapers.base import ScrapeResult
from scrapers.export import save_to_excel
from scrapers.manager import ScrapeOrchestrator
from scrapers.settings import ScraperSettings


def print_summary(result: ScrapeResult, preview: int = 5):
    """Print page outcomes and the first few listings."""
    print(f"\n{'='*60}")
    print(f"Scrape finished: {result.total} listings in {result.duration_seconds:.1f}s")
    print(f"{'='*60}\n")

    for page in result.pages:
        line = f"[{page.status.value:7}] {page.count:4} - {page.url}"
        if page.error:
            line += f"  ({page.error})"
        print(line)
        for listing_error in page.listing_errors:
            print(f"            skipped '{listing_error['title']}': {listing_error['error']}")

    if result.listings:
        print()
        for i, listing in enumerate(result.listings[:preview]):
            print(f"{i+1}. {listing.title}")
            print(f"   Price: {listing.price}")
            print(f"   Location: {listing.location}")
            print(f"   Phone: {listing.phone}")
            print(f"   URL: {listing.url}")
        if result.total > preview:
            print(f"... and {result.total - preview} more listings")


async def run(args, settings: ScraperSettings) -> ScrapeResult:
    overrides = {}
    if args.limit:
        overrides['max_results'] = args.limit
    if args.headed:
        overrides['headless'] = False
        overrides['reveal_headless'] = False

    config = settings.site_config().with_overrides(**overrides) if overrides else settings.site_config()
    orchestrator = ScrapeOrchestrator(config)

    if args.url:
        return await orchestrator.collect_one(args.url)
    if args.urls:
        urls = [u.strip() for u in args.urls.split(',') if u.strip()]
        return await orchestrator.collect_many(urls)
    return await orchestrator.collect_all(args.homepage)


def main():
    parser = argparse.ArgumentParser(description='Scrape Haraj listing pages')
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument('--url', type=str, help='Scrape a single listing page')
    target.add_argument('--urls', type=str, help='Scrape comma-separated section pages')
    target.add_argument('--homepage', type=str, help='Scrape every section linked from a homepage')
    parser.add_argument('--limit', type=int, default=0, help='Override the result cap')
    parser.add_argument('--headed', action='store_true', help='Show the browser windows')
    parser.add_argument('--output', type=str, help='Write the listings to this .xlsx file')
    parser.add_argument('--json', action='store_true', help='Print the full result as JSON')

    args = parser.parse_args()
    settings = ScraperSettings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format=settings.log_format,
    )

    result = asyncio.run(run(args, settings))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
    else:
        print_summary(result)

    if args.output:
        if result.listings:
            rows = save_to_excel(result.listings, args.output)
            print(f"\nWrote {rows} rows to {args.output}")
        else:
            print("\nNo data found, spreadsheet not written")

    return 0 if result.listings or not result.has_errors else 1


if __name__ == '__main__':
    raise SystemExit(main())
