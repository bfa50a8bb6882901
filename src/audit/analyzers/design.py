"""Design and UX analyzer."""

from __future__ import annotations

import re

from src.api.schemas import Category, DesignUxData, Severity

from .models import AnalyzerResult, make_issue, parse_markup

CTA_KEYWORDS = (
    "prenota",
    "ordina",
    "chiama",
    "contattaci",
    "acquista",
    "book now",
    "order now",
    "call us",
    "contact",
    "buy now",
)

# Character offset into the markup treated as "above the fold".
CTA_ABOVE_FOLD_THRESHOLD = 5000

MAX_FONTS = 4
MAX_COLORS = 8

_FONT_RE = re.compile(r"font-family:\s*([^;'\"]+)")
_COLOR_RE = re.compile(r"color:\s*(#[0-9a-f]{3,6}|rgb\([^)]+\))")


def _first_cta_position(lower_html: str) -> int | None:
    positions = [pos for pos in (lower_html.find(k) for k in CTA_KEYWORDS) if pos >= 0]
    return min(positions) if positions else None


def analyze_design_ux(html: str, url: str) -> AnalyzerResult:
    """Check navigation, call-to-action placement, viewport meta and style variety."""
    soup = parse_markup(html)
    lower_html = html.lower()

    has_navigation = soup.select_one('nav, .nav, .menu, [role="navigation"]') is not None

    cta_position = _first_cta_position(lower_html)
    primary_cta_found = cta_position is not None
    primary_cta_above_fold = primary_cta_found and cta_position < CTA_ABOVE_FOLD_THRESHOLD

    fonts = {m.strip() for m in _FONT_RE.findall(lower_html)}
    fonts.update(
        link.get("href", "")
        for link in soup.find_all("link", href=True)
        if "font" in link["href"].lower()
    )
    fonts.discard("")
    colors = {m.strip() for m in _COLOR_RE.findall(lower_html)}

    has_viewport_meta = soup.find("meta", attrs={"name": "viewport"}) is not None

    issues = []
    ux = Category.UX_DESIGN

    if not has_navigation:
        issues.append(make_issue(ux, "MISSING_NAV", Severity.MAJOR, "Navigation landmark not detected", url))
    if not primary_cta_found:
        issues.append(make_issue(ux, "NO_PRIMARY_CTA", Severity.MAJOR, "No clear call-to-action found", url))
    elif not primary_cta_above_fold:
        issues.append(make_issue(
            ux, "NO_CTA_ABOVE_FOLD", Severity.MINOR,
            "Primary call-to-action not found near top of page", url,
        ))
    if not has_viewport_meta:
        issues.append(make_issue(
            ux, "MISSING_VIEWPORT_META", Severity.CRITICAL, "Missing responsive viewport meta tag", url,
        ))
    if len(fonts) > MAX_FONTS:
        issues.append(make_issue(
            ux, "EXCESSIVE_FONTS", Severity.MINOR, f"{len(fonts)} different fonts detected", url,
        ))
    if len(colors) > MAX_COLORS:
        issues.append(make_issue(
            ux, "EXCESSIVE_COLORS", Severity.MINOR,
            f"{len(colors)} inline text colors may hurt consistency", url,
        ))

    data = DesignUxData(
        has_navigation=has_navigation,
        primary_cta_found=primary_cta_found,
        primary_cta_above_fold=primary_cta_above_fold,
        font_count=len(fonts),
        color_count=len(colors),
        has_viewport_meta=has_viewport_meta,
    )
    return AnalyzerResult(data=data, issues=issues)
