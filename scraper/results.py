"""
Result writer: re-index ids, split into chunks, write one JSON file per chunk.

A single chunk is written as {site}.json; more than one as {site}-1.json,
{site}-2.json, ... Each save records its file names in
.manifests/{site}.json; files listed by the previous manifest but not written
again are removed, so the directory reflects the latest run. Only files listed in a
site's own manifest are ever removed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from scraper.storage import write_json
from shared.logging import get_logger

logger = get_logger(__name__)

MANIFEST_DIR = ".manifests"


def reindex_records(records: Sequence[dict]) -> list[dict]:
    """Copies of the records with ids rewritten to 1..n in order."""
    return [{**record, "id": index} for index, record in enumerate(records, start=1)]


def chunk_records(records: Sequence[dict], limit: int) -> list[list[dict]]:
    if limit < 1:
        raise ValueError(f"Chunk limit must be at least 1, got {limit}")
    return [list(records[i : i + limit]) for i in range(0, len(records), limit)]


def build_result_paths(results_dir: str | Path, site_name: str, chunk_count: int) -> list[Path]:
    root = Path(results_dir)
    if chunk_count <= 1:
        return [root / f"{site_name}.json"]
    return [root / f"{site_name}-{i}.json" for i in range(1, chunk_count + 1)]


def manifest_path(results_dir: str | Path, site_name: str) -> Path:
    return Path(results_dir) / MANIFEST_DIR / f"{site_name}.json"


def existing_result_paths(results_dir: str | Path, site_name: str) -> list[Path]:
    """Result files written by the last save of site_name that are still on disk."""
    path = manifest_path(results_dir, site_name)
    if not path.is_file():
        return []
    try:
        names = json.loads(path.read_text(encoding="utf-8")).get("files", [])
    except (ValueError, AttributeError) as e:
        logger.warning(
            "result_manifest_unreadable",
            path=str(path),
            error=str(e),
            error_type=type(e).__name__,
        )
        return []
    root = Path(results_dir)
    # Bare file names only; a manifest never points outside results_dir
    return sorted(
        root / name
        for name in names
        if isinstance(name, str) and name == Path(name).name and (root / name).is_file()
    )


def save_results(
    site_name: str,
    records: Sequence[dict],
    *,
    results_dir: str | Path,
    product_limit: int,
    reindex: bool = True,
) -> list[Path]:
    """
    Write records for one site; returns written paths (empty when no records).
    """
    if not records:
        logger.info("results_skipped_empty", site=site_name)
        return []

    rows = reindex_records(records) if reindex else list(records)
    chunks = chunk_records(rows, product_limit)
    paths = build_result_paths(results_dir, site_name, len(chunks))

    for stale in set(existing_result_paths(results_dir, site_name)) - set(paths):
        stale.unlink()
        logger.debug("stale_result_removed", path=str(stale))

    for path, chunk in zip(paths, chunks):
        size, checksum = write_json(path, chunk)
        logger.info(
            "results_saved",
            site=site_name,
            path=str(path),
            records=len(chunk),
            size_bytes=size,
            checksum=checksum,
        )
    write_json(
        manifest_path(results_dir, site_name),
        {"site": site_name, "files": [path.name for path in paths]},
    )
    return paths
