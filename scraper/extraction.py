"""
Structural signal extraction for the website scraper.

The browser side only snapshots elements (computed style, bounding box and
text); the filtering rules live here so they apply identically whatever
produced the snapshot.
"""

from typing import Dict, List

from api.models import CallToAction, FormSummary, Heading, NavigationSummary

HEADING_SELECTOR = "h1, h2, h3"
CTA_SELECTOR = "a, button"
FORM_SELECTOR = "form"
NAVIGATION_SELECTOR = "nav"
META_DESCRIPTION_SELECTOR = 'meta[name="description"]'

HEADING_TAGS = {"H1", "H2", "H3"}
MIN_CTA_TEXT_LENGTH = 3

# Browser-side snapshot scripts

HEADING_SNAPSHOT_JS = """
(elements) => elements.map((el) => {
    const style = window.getComputedStyle(el);
    return {
        tag: el.tagName,
        text: el.textContent || "",
        display: style.display,
        visibility: style.visibility,
        opacity: style.opacity,
    };
})
"""

CTA_SNAPSHOT_JS = """
(elements) => elements.map((el) => {
    const style = window.getComputedStyle(el);
    const rect = el.getBoundingClientRect();
    return {
        text: el.textContent || "",
        display: style.display,
        visibility: style.visibility,
        opacity: style.opacity,
        rect: {
            top: rect.top,
            left: rect.left,
            bottom: rect.bottom,
            right: rect.right,
            y: rect.y,
        },
    };
})
"""

WINDOW_SIZE_JS = "() => ({ width: window.innerWidth, height: window.innerHeight })"

FORM_INPUT_COUNT_JS = """
(forms) => forms.map((form) => form.querySelectorAll("input, select, textarea").length)
"""

NAVIGATION_LINK_COUNT_JS = '(nav) => nav.querySelectorAll("a").length'

META_CONTENT_JS = '(el) => el.getAttribute("content")'


def is_style_visible(snapshot: Dict) -> bool:
    """display != none, visibility != hidden and opacity != 0"""
    if snapshot.get("display") == "none":
        return False
    if snapshot.get("visibility") == "hidden":
        return False

    opacity = snapshot.get("opacity")
    if opacity is None or opacity == "":
        return True
    try:
        return float(opacity) != 0
    except (TypeError, ValueError):
        return True


def is_within_viewport(rect: Dict, window_width: float, window_height: float) -> bool:
    """Whole bounding box inside the window"""
    return (
        rect.get("top", -1) >= 0
        and rect.get("left", -1) >= 0
        and rect.get("bottom", window_height + 1) <= window_height
        and rect.get("right", window_width + 1) <= window_width
    )


def filter_headings(snapshots: List[Dict]) -> List[Heading]:
    """
    Keep visible headings with non-empty trimmed text, in document order.
    """
    headings = []
    for snapshot in snapshots:
        if not is_style_visible(snapshot):
            continue

        tag = str(snapshot.get("tag", "")).upper()
        text = (snapshot.get("text") or "").strip()
        if tag not in HEADING_TAGS or not text:
            continue

        headings.append(Heading(tag=tag, text=text))
    return headings


def filter_ctas(
    snapshots: List[Dict],
    window_width: float,
    window_height: float,
    viewport_height: float,
) -> List[CallToAction]:
    """
    Keep links and buttons that are visible and entirely inside the viewport.

    A CTA is above the fold when its top is strictly less than the viewport
    height; text of 2 characters or fewer is dropped.
    """
    ctas = []
    for snapshot in snapshots:
        if not is_style_visible(snapshot):
            continue

        rect = snapshot.get("rect") or {}
        if not is_within_viewport(rect, window_width, window_height):
            continue

        text = (snapshot.get("text") or "").strip()
        if len(text) < MIN_CTA_TEXT_LENGTH:
            continue

        top = rect.get("y", rect.get("top", 0))
        ctas.append(CallToAction(text=text, is_above_the_fold=top < viewport_height))
    return ctas


def build_forms(input_counts: List[int]) -> List[FormSummary]:
    return [FormSummary(input_count=int(count)) for count in input_counts]


def build_navigation(link_count) -> NavigationSummary:
    return NavigationSummary(link_count=int(link_count or 0))
