"""site_crawler.parser: разбор robots.txt, sitemap.xml и HTML-страниц."""
