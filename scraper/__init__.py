"""
Configuration-driven product scraper.

Sites are described in `scraper.sites`; `scraper.runner` drives one
browser per site through the scrapers in `scraper.scrapers` and writes
results with `scraper.results`. Side tools live in `scraper.tools`.
"""
