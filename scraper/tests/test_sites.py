"""
Unit tests for the site configuration table: parsing, validation, loading, selection.
"""

from __future__ import annotations

import json

import pytest

from scraper.sites import (
    DEFAULT_MAX_PAGES,
    IGNORE_LIST,
    SCRAPING_CONFIG,
    SiteConfigError,
    load_site_configs,
    load_site_table,
    parse_global_config,
    parse_site_config,
    select_sites,
)


def _raw_site(**overrides):
    raw = {
        "url": "https://shop.example.com/collections/all",
        "selectors": {
            "product": ".card",
            "name": ".card__title",
            "price": ".card__price",
            "image": ".card img",
        },
    }
    raw.update(overrides)
    return raw


def test_builtin_table_parses_and_keeps_order():
    """Built-in table parses; order follows the raw table."""
    configs = load_site_configs()
    assert list(configs) == list(SCRAPING_CONFIG)
    snack = configs["usasnackshop"]
    assert snack.url == "https://usasnackshop.com/collections/all"
    assert snack.wait_selector == "#product-grid"
    assert snack.wait_time_ms == 8000
    assert snack.auto_scroll is True
    assert snack.pagination.enabled is True
    assert snack.pagination.max_pages == 14
    assert snack.selectors.product == (".grid__item",)


def test_parse_site_config_string_selector_becomes_single_item_chain():
    site = parse_site_config("shop", _raw_site())
    assert site.selectors.name == (".card__title",)
    assert site.selectors.link == ()
    assert site.type == "standard"
    assert site.pagination.enabled is False
    assert site.pagination.max_pages == DEFAULT_MAX_PAGES


def test_parse_site_config_selector_list_is_fallback_chain():
    raw = _raw_site()
    raw["selectors"]["name"] = [".title", "", "h3"]
    site = parse_site_config("shop", raw)
    assert site.selectors.name == (".title", "h3")


@pytest.mark.parametrize("url", [None, "", "ftp://example.com/x", "not a url", "https://"])
def test_parse_site_config_rejects_bad_url(url):
    with pytest.raises(SiteConfigError, match="url"):
        parse_site_config("shop", _raw_site(url=url))


def test_parse_site_config_standard_requires_selectors():
    raw = _raw_site()
    del raw["selectors"]
    with pytest.raises(SiteConfigError, match="require 'selectors'"):
        parse_site_config("shop", raw)


def test_parse_site_config_reports_missing_selector_names():
    raw = _raw_site()
    del raw["selectors"]["price"]
    raw["selectors"]["image"] = []
    with pytest.raises(SiteConfigError, match="price, image"):
        parse_site_config("shop", raw)


def test_parse_site_config_image_type_needs_no_selectors():
    raw = _raw_site(type="image")
    del raw["selectors"]
    site = parse_site_config("gallery", raw)
    assert site.type == "image"
    assert site.selectors is None


def test_parse_site_config_unknown_type_is_kept():
    site = parse_site_config("shop", _raw_site(type="Carousel"))
    assert site.type == "carousel"


def test_parse_site_config_pagination_requires_next_selector():
    with pytest.raises(SiteConfigError, match="nextSelector"):
        parse_site_config("shop", _raw_site(pagination={"enabled": True}))


def test_parse_site_config_disabled_pagination_without_next_selector_is_ok():
    site = parse_site_config("shop", _raw_site(pagination={"enabled": False, "maxPages": 3}))
    assert site.pagination.enabled is False
    assert site.pagination.max_pages == 3


def test_parse_site_config_negative_wait_time_clamped():
    site = parse_site_config("shop", _raw_site(waitTime=-50, waitForNetworkIdle=True))
    assert site.wait_time_ms == 0
    assert site.wait_for_network_idle is True


def test_parse_global_config_defaults_and_minimum():
    assert parse_global_config(None).product_limit == 30
    assert parse_global_config(None).reindex_products is True
    parsed = parse_global_config({"productLimit": 0, "reindexProducts": False})
    assert parsed.product_limit == 1
    assert parsed.reindex_products is False


def test_load_site_table_from_json_file(tmp_path):
    path = tmp_path / "sites.json"
    path.write_text(
        json.dumps(
            {
                "ignoreList": ["b"],
                "global": {"productLimit": 10, "reindexProducts": False},
                "sites": {"a": _raw_site(), "b": _raw_site()},
            }
        ),
        encoding="utf-8",
    )
    table = load_site_table(path)
    assert list(table.sites) == ["a", "b"]
    assert table.ignore_list == ["b"]
    assert table.global_config.product_limit == 10
    assert table.global_config.reindex_products is False


def test_load_site_table_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_site_table(tmp_path / "missing.json")


def test_load_site_table_rejects_non_object_sites(tmp_path):
    path = tmp_path / "sites.json"
    path.write_text(json.dumps({"sites": ["a"]}), encoding="utf-8")
    with pytest.raises(SiteConfigError, match="'sites' must be an object"):
        load_site_table(path)


def test_select_sites_skips_ignore_list_by_default():
    configs = load_site_configs()
    selected = select_sites(configs)
    names = [site.name for site in selected]
    assert "doughnut" in IGNORE_LIST
    assert names == ["usasnackshop"]


def test_select_sites_explicit_names_bypass_ignore_list():
    configs = load_site_configs()
    selected = select_sites(configs, ["doughnut", "usasnackshop", "doughnut"])
    assert [site.name for site in selected] == ["doughnut", "usasnackshop"]


def test_select_sites_unknown_name_raises():
    with pytest.raises(SiteConfigError, match="nope"):
        select_sites(load_site_configs(), ["nope"])
