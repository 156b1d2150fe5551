"""seo_scout.parser: extraction of SEO signals from raw HTML."""
