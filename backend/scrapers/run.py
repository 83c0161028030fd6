#!/usr/bin/env python3
"""
Run a single scrape from the command line and print its events.

Usage:
    cd backend
    python -m scrapers.run <country> <degree> --fields <field> [<field> ...]

Examples:
    python -m scrapers.run germany msc --fields programName university
    python -m scrapers.run netherlands phd --fields id tuitionFee --max-pages 1
    python -m scrapers.run --list                # List portals and fields
"""

import asyncio
import argparse
import logging
import json

from scrapers.base import CrawlOptions, EventKind
from scrapers.manager import ScraperManager, default_renderer_factory


def print_event(event, raw: bool = False):
    """Print one event, either as an SSE frame or human readable."""
    if raw:
        print(event.to_sse(), end='')
        return

    if event.kind == EventKind.ENTRY:
        print(json.dumps(event.data['entry'], ensure_ascii=False))
    elif event.kind == EventKind.DONE:
        print(f"\n{'='*60}")
        print(f"DONE: {event.data['count']} entries in {event.data['elapsedSeconds']}s")
        print(f"{'='*60}")
    else:
        print(f"[{event.kind.value.upper()}] {event.data['message']}")


async def run(args) -> int:
    manager = ScraperManager(
        default_renderer_factory(headless=not args.headed, timeout=args.timeout),
        CrawlOptions(detail_concurrency=args.concurrency, max_pages=args.max_pages),
    )
    payload = {'country': args.country, 'degree': args.degree, 'fields': args.fields}

    failed = False
    async for event in manager.stream_scrape(payload):
        print_event(event, raw=args.json)
        failed = failed or event.kind == EventKind.ERROR
    return 1 if failed else 0


def list_portals():
    summary = ScraperManager.list_portals()
    print(f"\n{'Key':<6} {'Portal':<10} {'Name':<18} URL")
    print('-' * 70)
    for portal in summary['portals']:
        print(f"{portal['key']:<6} {portal['portal']:<10} {portal['name']:<18} {portal['url']}")
    print(f"\nFields: {', '.join(summary['fields'])}")
    print(f"Detail-page fields: {', '.join(summary['detail_fields'])}")


def main():
    parser = argparse.ArgumentParser(description='Scrape Studyportals program listings')
    parser.add_argument('country', nargs='?', help='Target country, e.g. germany')
    parser.add_argument('degree', nargs='?', help='Degree category: msc, bsc or phd')
    parser.add_argument('--fields', nargs='+', default=['programName', 'university'],
                        help='Output fields to extract')
    parser.add_argument('--list', action='store_true', help='List portals and fields')
    parser.add_argument('--json', action='store_true', help='Print raw SSE frames')
    parser.add_argument('--headed', action='store_true', help='Show the browser window')
    parser.add_argument('--timeout', type=float, default=60.0, help='Navigation timeout (seconds)')
    parser.add_argument('--concurrency', type=int, default=1, help='Parallel detail pages')
    parser.add_argument('--max-pages', type=int, default=0, help='Stop after N listing pages')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.list:
        list_portals()
        return 0

    if not args.country or not args.degree:
        parser.error('country and degree are required')

    return asyncio.run(run(args))


if __name__ == '__main__':
    raise SystemExit(main())
