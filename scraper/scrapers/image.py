"""
Image scraper: every <img> on the page becomes a record with a camera product name.
"""

from __future__ import annotations

import random
from typing import Optional

from playwright.async_api import Page

from scraper.crawl import normalize_whitespace
from scraper.mock_data import CAMERA_PRODUCTS, generate_camera_price
from shared.logging import get_logger

logger = get_logger(__name__)

COLLECT_IMAGES_JS = """
() => Array.from(document.querySelectorAll('img')).map((img) => ({
  src: img.src || '',
  width: img.naturalWidth || img.width || 0,
  height: img.naturalHeight || img.height || 0,
  alt: img.alt || '',
}))
"""


def build_image_records(raw_images: list[dict], *, rng: Optional[random.Random] = None) -> list[dict]:
    """
    Keep images with a non-empty src; name from alt text, else the camera list.
    """
    images = [img for img in raw_images if (img.get("src") or "").strip()]
    records = []
    for index, img in enumerate(images):
        alt = normalize_whitespace(img.get("alt"))
        records.append(
            {
                "id": index + 1,
                "name": alt or CAMERA_PRODUCTS[index % len(CAMERA_PRODUCTS)],
                "price": generate_camera_price(rng),
                "image": img["src"].strip(),
                "alt": alt,
                "dimensions": f"{img.get('width') or 0}x{img.get('height') or 0}",
            }
        )
    return records


async def image_scraper(page: Page, *, rng: Optional[random.Random] = None) -> list[dict]:
    logger.info("image_scraper_started")
    raw = await page.evaluate(COLLECT_IMAGES_JS)
    records = build_image_records(raw if isinstance(raw, list) else [], rng=rng)
    logger.info("images_extracted", images_found=len(raw or []), records_kept=len(records))
    return records
