"""
Breadth-first, same-domain web crawler with a configurable depth limit.
Lists every page visited and every request that failed.
"""
from bfs_crawler.core import CrawlEngine, EngineError, crawl
from bfs_crawler.results import CrawlError, CrawlResult, ErrorKind

__version__ = "1.0.0"
__all__ = ["crawl", "CrawlEngine", "CrawlError", "CrawlResult", "EngineError", "ErrorKind"]
