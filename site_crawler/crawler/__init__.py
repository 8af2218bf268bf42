"""site_crawler.crawler: fetching, link extraction, the crawl engine and its event sinks."""
