"""Student portal scraper.

Crawls the legacy school portal from an already signed-in session, turns
each page into structured data and merges everything into one
AggregateRecord for the dashboard's sync endpoint.
"""

from portal_sync.crawl import PortalCrawler, build_page_plan
from portal_sync.fetch import BrowserFetcher, HttpFetcher
from portal_sync.models import AggregateRecord, CrawlResult
from portal_sync.sync import SyncClient

__all__ = [
    "PortalCrawler",
    "build_page_plan",
    "BrowserFetcher",
    "HttpFetcher",
    "AggregateRecord",
    "CrawlResult",
    "SyncClient",
]
