"""seo_scout.crawler: frontier, fetcher, link extraction and the crawl loop."""
