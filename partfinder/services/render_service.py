"""
Render Service - Markdown to sanitized HTML for the browser
"""
import logging
import re

import markdown
from bs4 import BeautifulSoup

from partfinder.errors import RenderError

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["extra", "sane_lists", "nl2br", "toc"]

# Elements removed together with their content
BLOCKED_TAGS = [
    "script", "style", "iframe", "frame", "frameset", "object", "embed", "applet",
    "noscript", "template", "svg", "math", "meta", "link", "base", "form", "textarea",
    "select", "button", "input",
]

# Markup that markdown and its extensions produce; any other element is unwrapped
ALLOWED_TAGS = {
    "h1", "h2", "h3", "h4", "h5", "h6", "p", "br", "hr", "div", "span",
    "ul", "ol", "li", "dl", "dt", "dd", "blockquote",
    "a", "img", "em", "strong", "b", "i", "del", "ins", "sup", "sub", "abbr",
    "code", "pre", "table", "thead", "tbody", "tfoot", "tr", "th", "td",
}

GLOBAL_ATTRIBUTES = {"id", "class", "title"}

ALLOWED_ATTRIBUTES = {
    "a": {"href"},
    "img": {"src", "alt"},
    "ol": {"start"},
    "th": {"align"},
    "td": {"align"},
}

URL_ATTRIBUTES = {"href", "src"}

SAFE_URL_SCHEMES = {"http", "https", "mailto"}

_URL_SCHEME = re.compile(r"^([a-z][a-z0-9+.\-]*):")
_URL_NOISE = re.compile(r"[\s\x00-\x1f]+")

COMPARISON_CLASSES = {
    "table": "comparison-table",
    "tr": "comparison-row",
    "td": "comparison-cell",
    "th": "comparison-header",
}


def _is_safe_url(value: str) -> bool:
    compact = _URL_NOISE.sub("", value).lower()
    match = _URL_SCHEME.match(compact)
    # Relative links and #fragments have no scheme
    return match is None or match.group(1) in SAFE_URL_SCHEMES


def sanitize_html(html: str) -> str:
    """
    Keep only the elements and attributes markdown produces.

    Blocked elements are removed with their content, other unknown elements
    are replaced by their children, and href/src values must be http(s),
    mailto or relative.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(BLOCKED_TAGS):
        tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue

        allowed = GLOBAL_ATTRIBUTES | ALLOWED_ATTRIBUTES.get(tag.name, set())
        for attr in list(tag.attrs):
            name = attr.lower()
            if name not in allowed:
                del tag.attrs[attr]
            elif name in URL_ATTRIBUTES and not _is_safe_url(str(tag.attrs[attr])):
                del tag.attrs[attr]
    return str(soup)


def _add_comparison_classes(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for name, css_class in COMPARISON_CLASSES.items():
        for tag in soup.find_all(name):
            classes = tag.get("class") or []
            if css_class not in classes:
                tag["class"] = classes + [css_class]
    return str(soup)


def render_markdown(text: str, comparison: bool = False) -> str:
    """
    Convert generated markdown to HTML safe to insert into the page.

    Args:
        text: Markdown from the generation call
        comparison: Add the comparison-table CSS classes to table markup

    Returns:
        Sanitized HTML

    Raises:
        RenderError: conversion failed
    """
    try:
        html = markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)
        html = sanitize_html(html)
        if comparison:
            html = _add_comparison_classes(html)
    except Exception as e:
        logger.error("Markdown rendering failed: %s", e)
        raise RenderError("Failed to render the generated response") from e
    return html
