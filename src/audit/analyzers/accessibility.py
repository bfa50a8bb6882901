"""Heuristic accessibility analyzer."""

from __future__ import annotations

from bs4 import Tag

from src.api.schemas import AccessibilityData, Category, Landmarks, Severity

from .models import AnalyzerResult, make_issue, parse_markup

# Input types that carry their own accessible name or are not user-facing.
_SELF_LABELLED_INPUT_TYPES = {"hidden", "submit", "button", "reset", "image"}


def _has_aria_name(element: Tag) -> bool:
    return bool((element.get("aria-label") or "").strip() or element.get("aria-labelledby"))


def _form_controls(soup) -> list[Tag]:
    controls = []
    for element in soup.find_all(["input", "select", "textarea"]):
        if element.name == "input":
            input_type = (element.get("type") or "text").strip().lower()
            if input_type in _SELF_LABELLED_INPUT_TYPES:
                continue
        controls.append(element)
    return controls


def analyze_accessibility(html: str, url: str) -> AnalyzerResult:
    """Check document language, landmarks, form labels and button names."""
    soup = parse_markup(html)

    html_tag = soup.find("html")
    lang = (html_tag.get("lang") or "").strip() if html_tag else ""

    landmarks = Landmarks(
        main=bool(soup.find("main") or soup.find(attrs={"role": "main"})),
        nav=bool(soup.find("nav") or soup.find(attrs={"role": "navigation"})),
        header=soup.find("header") is not None,
        footer=soup.find("footer") is not None,
    )

    label_targets = {label["for"] for label in soup.find_all("label", attrs={"for": True})}
    controls = _form_controls(soup)
    labeled_inputs = sum(
        1
        for control in controls
        if control.get("id") in label_targets
        or control.find_parent("label") is not None
        or _has_aria_name(control)
    )
    unlabeled_inputs = len(controls) - labeled_inputs

    empty_buttons = sum(
        1
        for button in soup.find_all("button")
        if not button.get_text(strip=True) and not _has_aria_name(button)
    )

    issues = []
    a11y = Category.ACCESSIBILITY

    if not lang:
        issues.append(make_issue(
            a11y, "MISSING_LANG", Severity.MAJOR, "html element is missing lang attribute", url,
        ))
    if not landmarks.main:
        issues.append(make_issue(a11y, "MISSING_MAIN", Severity.MINOR, "Main landmark not found", url))
    if unlabeled_inputs:
        issues.append(make_issue(
            a11y, "UNLABELED_INPUTS", Severity.MAJOR,
            f"{unlabeled_inputs} form fields missing labels", url,
        ))
    if empty_buttons:
        issues.append(make_issue(
            a11y, "EMPTY_BUTTONS", Severity.MINOR,
            f"{empty_buttons} buttons have no accessible name", url,
        ))

    data = AccessibilityData(
        has_lang_attribute=bool(lang),
        landmarks=landmarks,
        labeled_inputs=labeled_inputs,
        unlabeled_inputs=unlabeled_inputs,
        empty_buttons=empty_buttons,
    )
    return AnalyzerResult(data=data, issues=issues)
