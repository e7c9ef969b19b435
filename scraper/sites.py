"""
Site configuration table: which sites to scrape and how.

Each entry maps a site name to its URL, wait conditions, CSS selectors and
pagination rules. The raw table keeps the camelCase keys used by the JSON
site files; `parse_site_config` turns one raw entry into a typed
`SiteConfig`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence
from urllib.parse import urlparse

DEFAULT_MAX_PAGES = 5

REQUIRED_STANDARD_SELECTORS = ("product", "name", "price", "image")

# Sites that are never scraped unless requested by name.
IGNORE_LIST: list[str] = [
    "doughnut",
]

GLOBAL_CONFIG: dict[str, Any] = {
    "productLimit": 30,
    "reindexProducts": True,
}

SCRAPING_CONFIG: dict[str, dict[str, Any]] = {
    "usasnackshop": {
        "url": "https://usasnackshop.com/collections/all",
        "type": "standard",
        "waitSelector": "#product-grid",
        "autoScroll": True,
        "waitTime": 8000,
        "pagination": {
            "enabled": True,
            "nextSelector": ".pagination__item-arrow.link",
            "pageSelector": (
                ".pagination__item:not(.pagination__item--current)"
                ":not(.pagination__item-arrow)"
            ),
            "maxPages": 14,
        },
        "selectors": {
            "product": ".grid__item",
            "name": ".full-unstyled-link",
            "price": ".price-item.price-item--regular",
            "image": ".media.media--transparent.media--hover-effect img",
        },
    },
    "doughnut": {
        "url": (
            "https://www.doughnut.com.tw/v2/official/SalePageCategory/445264"
            "?sortMode=PageView"
        ),
        "type": "standard",
        "waitSelector": ".column-grid-container__column",
        "autoScroll": True,
        "waitTime": 8000,
        "selectors": {
            "product": ".column-grid-container__column",
            "name": "[data-qe-id='body-meta-field-text']",
            "price": "[data-qe-id='body-price-text']",
            "image": ".product-card__vertical__media-tall",
            "link": "a.sc-hqiKlG",
        },
    },
}


class SiteConfigError(ValueError):
    """Raised when a site entry is missing required fields or is malformed."""


@dataclass(frozen=True)
class SelectorSet:
    """
    Named selector chains for one product element.

    Every field is an ordered list; the first selector that matches wins.
    """

    product: tuple[str, ...]
    name: tuple[str, ...]
    price: tuple[str, ...]
    image: tuple[str, ...]
    link: tuple[str, ...] = ()

    def as_payload(self) -> dict[str, list[str]]:
        """Plain dict passed into page.evaluate."""
        return {
            "product": list(self.product),
            "name": list(self.name),
            "price": list(self.price),
            "image": list(self.image),
            "link": list(self.link),
        }


@dataclass(frozen=True)
class PaginationConfig:
    enabled: bool = False
    next_selector: Optional[str] = None
    page_selector: Optional[str] = None
    max_pages: int = DEFAULT_MAX_PAGES


@dataclass(frozen=True)
class SiteConfig:
    name: str
    url: str
    type: str = "standard"
    wait_selector: Optional[str] = None
    wait_time_ms: int = 0
    auto_scroll: bool = False
    wait_for_network_idle: bool = False
    selectors: Optional[SelectorSet] = None
    pagination: PaginationConfig = field(default_factory=PaginationConfig)


@dataclass(frozen=True)
class GlobalConfig:
    product_limit: int = 30
    reindex_products: bool = True


def _selector_chain(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value.strip(),) if value.strip() else ()
    if isinstance(value, (list, tuple)):
        return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
    return ()


def _optional_str(value: object) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _non_negative_int(value: object, default: int) -> int:
    if isinstance(value, bool) or value is None:
        return default
    try:
        return max(0, int(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _parse_selectors(name: str, raw: object) -> SelectorSet:
    if not isinstance(raw, Mapping):
        raise SiteConfigError(f"Site {name!r}: 'selectors' must be a mapping")
    chains = {key: _selector_chain(raw.get(key)) for key in (*REQUIRED_STANDARD_SELECTORS, "link")}
    missing = [key for key in REQUIRED_STANDARD_SELECTORS if not chains[key]]
    if missing:
        raise SiteConfigError(f"Site {name!r}: missing selectors: {', '.join(missing)}")
    return SelectorSet(**chains)


def _parse_pagination(name: str, raw: object) -> PaginationConfig:
    if raw is None:
        return PaginationConfig()
    if not isinstance(raw, Mapping):
        raise SiteConfigError(f"Site {name!r}: 'pagination' must be a mapping")
    enabled = bool(raw.get("enabled", False))
    next_selector = _optional_str(raw.get("nextSelector"))
    if enabled and not next_selector:
        raise SiteConfigError(f"Site {name!r}: pagination enabled without 'nextSelector'")
    max_pages = _non_negative_int(raw.get("maxPages"), DEFAULT_MAX_PAGES)
    return PaginationConfig(
        enabled=enabled,
        next_selector=next_selector,
        page_selector=_optional_str(raw.get("pageSelector")),
        max_pages=max(1, max_pages),
    )


def parse_site_config(name: str, raw: Mapping[str, Any]) -> SiteConfig:
    """
    Validate one raw site entry and return a typed SiteConfig.

    Raises SiteConfigError when the URL is missing or not http(s), when a
    standard site lacks one of product/name/price/image selectors, or when
    pagination is enabled without a next selector.
    """
    if not isinstance(raw, Mapping):
        raise SiteConfigError(f"Site {name!r}: entry must be a mapping")

    url = _optional_str(raw.get("url"))
    parsed = urlparse(url or "")
    if not url or parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise SiteConfigError(f"Site {name!r}: 'url' must be an absolute http(s) URL")

    site_type = (_optional_str(raw.get("type")) or "standard").lower()

    selectors: Optional[SelectorSet] = None
    if raw.get("selectors") is not None:
        selectors = _parse_selectors(name, raw.get("selectors"))
    elif site_type == "standard":
        raise SiteConfigError(f"Site {name!r}: standard sites require 'selectors'")

    return SiteConfig(
        name=name,
        url=url,
        type=site_type,
        wait_selector=_optional_str(raw.get("waitSelector")),
        wait_time_ms=_non_negative_int(raw.get("waitTime"), 0),
        auto_scroll=bool(raw.get("autoScroll", False)),
        wait_for_network_idle=bool(raw.get("waitForNetworkIdle", False)),
        selectors=selectors,
        pagination=_parse_pagination(name, raw.get("pagination")),
    )


def parse_global_config(raw: Optional[Mapping[str, Any]]) -> GlobalConfig:
    raw = raw or {}
    limit = _non_negative_int(raw.get("productLimit"), GlobalConfig.product_limit)
    return GlobalConfig(
        product_limit=max(1, limit),
        reindex_products=bool(raw.get("reindexProducts", GlobalConfig.reindex_products)),
    )


@dataclass(frozen=True)
class SiteTable:
    """Parsed site table: sites in configured order plus ignore list and globals."""

    sites: dict[str, SiteConfig]
    ignore_list: list[str]
    global_config: GlobalConfig


def load_site_table(path: Optional[str | Path] = None) -> SiteTable:
    """
    Load the site table from a JSON file, or the built-in table when path is None.

    The JSON file is shaped like {"ignoreList": [...], "global": {...}, "sites": {...}}.
    """
    if path is None:
        raw_sites: Mapping[str, Any] = SCRAPING_CONFIG
        ignore_list = list(IGNORE_LIST)
        global_config = parse_global_config(GLOBAL_CONFIG)
    else:
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Site config file not found: {file_path}")
        data = json.loads(file_path.read_text(encoding="utf-8"))
        if not isinstance(data, Mapping):
            raise SiteConfigError("Site config file must contain a JSON object")
        raw_sites = data.get("sites", {})
        if not isinstance(raw_sites, Mapping):
            raise SiteConfigError("Invalid site config: 'sites' must be an object")
        ignore_list = [str(item) for item in data.get("ignoreList", []) or []]
        global_config = parse_global_config(data.get("global"))

    sites = {name: parse_site_config(name, raw) for name, raw in raw_sites.items()}
    return SiteTable(sites=sites, ignore_list=ignore_list, global_config=global_config)


def load_site_configs(path: Optional[str | Path] = None) -> dict[str, SiteConfig]:
    """Site name -> SiteConfig, in configured order."""
    return load_site_table(path).sites


def select_sites(
    configs: Mapping[str, SiteConfig],
    names: Optional[Sequence[str]] = None,
    ignore_list: Iterable[str] = IGNORE_LIST,
) -> list[SiteConfig]:
    """
    Pick the sites to run.

    Without names: every configured site not on the ignore list, in order.
    With names: exactly those sites (ignore list does not apply); an
    unknown name raises SiteConfigError.
    """
    if names:
        unknown = [name for name in names if name not in configs]
        if unknown:
            raise SiteConfigError(f"Unknown site(s): {', '.join(unknown)}")
        return [configs[name] for name in dict.fromkeys(names)]

    ignored = set(ignore_list)
    return [site for name, site in configs.items() if name not in ignored]
