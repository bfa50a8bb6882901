"""Crawl limit presets for the audit pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CrawlPreset:
    """Configuration for a crawl size preset."""

    name: str
    max_pages: int
    max_depth: int


CRAWL_PRESETS: dict[str, CrawlPreset] = {
    "quick": CrawlPreset(name="quick", max_pages=5, max_depth=1),
    "standard": CrawlPreset(name="standard", max_pages=20, max_depth=2),
    "deep": CrawlPreset(name="deep", max_pages=50, max_depth=3),
}


def resolve_limits(
    preset: str | None,
    max_pages: int | None,
    max_depth: int | None,
    default_preset: str = "standard",
) -> tuple[int, int]:
    """Resolve a preset name plus explicit overrides into (max_pages, max_depth)."""
    tier = CRAWL_PRESETS[preset or default_preset]
    return (
        max_pages if max_pages is not None else tier.max_pages,
        max_depth if max_depth is not None else tier.max_depth,
    )
