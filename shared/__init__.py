"""
Shared utilities for the product scraper.

This package is intentionally small and focused. It provides:

- `shared.config` for environment-based configuration
- `shared.logging` for structlog-based structured logging

The scraper and the side tools treat `shared/` as read-only
infrastructure code.
"""
