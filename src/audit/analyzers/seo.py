"""On-page SEO analyzer."""

from __future__ import annotations

import re

from src.api.schemas import Category, SeoData, Severity

from .models import AnalyzerResult, make_issue, parse_markup, visible_text

MIN_TITLE_LENGTH = 20
MIN_DESCRIPTION_LENGTH = 60
MIN_WORD_COUNT = 200

_DESCRIPTION_RE = re.compile(r"^description$", re.IGNORECASE)
_ROBOTS_RE = re.compile(r"^robots$", re.IGNORECASE)


def analyze_seo(html: str, url: str) -> AnalyzerResult:
    """Check title, meta description, headings, word count and image alt text."""
    soup = parse_markup(html)

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    description_tag = soup.find("meta", attrs={"name": _DESCRIPTION_RE})
    meta_description = (description_tag.get("content") or "").strip() if description_tag else None

    h1_tags = soup.find_all("h1")
    h1_text = h1_tags[0].get_text(" ", strip=True) if h1_tags else ""
    word_count = len(visible_text(soup).split())

    images = soup.find_all("img")
    images_without_alt = sum(1 for img in images if not (img.get("alt") or "").strip())

    canonical_tag = soup.find("link", rel="canonical")
    robots_tag = soup.find("meta", attrs={"name": _ROBOTS_RE})

    issues = []
    seo = Category.SEO

    if not title:
        issues.append(make_issue(seo, "MISSING_TITLE", Severity.CRITICAL, "Missing <title> tag", url))
    elif len(title) < MIN_TITLE_LENGTH:
        issues.append(make_issue(
            seo, "SHORT_TITLE", Severity.MINOR,
            f"Title is shorter than {MIN_TITLE_LENGTH} characters", url,
        ))

    if not meta_description:
        issues.append(make_issue(
            seo, "MISSING_META_DESCRIPTION", Severity.MAJOR, "Missing meta description", url,
        ))
    elif len(meta_description) < MIN_DESCRIPTION_LENGTH:
        issues.append(make_issue(
            seo, "SHORT_META_DESCRIPTION", Severity.MINOR, "Meta description is quite short", url,
        ))

    if not h1_tags:
        issues.append(make_issue(seo, "MISSING_H1", Severity.MAJOR, "No H1 heading found", url))
    elif len(h1_tags) > 1:
        issues.append(make_issue(
            seo, "MULTIPLE_H1", Severity.MINOR, f"{len(h1_tags)} H1 headings found", url,
        ))

    if word_count < MIN_WORD_COUNT:
        issues.append(make_issue(
            seo, "LOW_WORD_COUNT", Severity.MAJOR,
            f"Low on-page word count ({word_count} < {MIN_WORD_COUNT} words)", url,
        ))

    if images_without_alt:
        issues.append(make_issue(
            seo, "IMAGES_WITHOUT_ALT", Severity.MAJOR,
            f"{images_without_alt} images missing alt text", url,
        ))

    data = SeoData(
        title=title,
        meta_description=meta_description or None,
        h1_text=h1_text,
        h1_count=len(h1_tags),
        h2_count=len(soup.find_all("h2")),
        word_count=word_count,
        images_total=len(images),
        images_without_alt=images_without_alt,
        canonical=canonical_tag.get("href") if canonical_tag else None,
        robots=robots_tag.get("content") if robots_tag else None,
    )
    return AnalyzerResult(data=data, issues=issues)
