"""OPML parser for importing and exporting feed subscriptions."""

import xml.etree.ElementTree as ET
from dataclasses import dataclass


@dataclass
class OPMLFeed:
    """A feed entry from an OPML file."""
    url: str
    title: str = ""
    category: str = ""


@dataclass
class OPMLDocument:
    """Parsed OPML document."""
    title: str
    feeds: list[OPMLFeed]


def parse_opml(xml_content: str | bytes) -> OPMLDocument:
    """
    Parse OPML XML content and extract feed subscriptions.

    Handles both flat and nested (categorized) OPML structures. A feed
    inside nested folders takes the innermost folder name as its category.

    Raises:
        ValueError: If XML is invalid or not OPML format
    """
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as e:
        raise ValueError(f"Invalid XML: {e}")

    # Verify it's an OPML document
    if root.tag.lower() != "opml":
        raise ValueError(f"Not an OPML document (root element: {root.tag})")

    # Get document title from head
    doc_title = ""
    head = root.find("head")
    if head is not None:
        title_elem = head.find("title")
        if title_elem is not None and title_elem.text:
            doc_title = title_elem.text.strip()

    body = root.find("body")
    if body is None:
        raise ValueError("OPML document missing <body> element")

    feeds: list[OPMLFeed] = []
    _parse_outlines(body, feeds, category="")

    return OPMLDocument(title=doc_title, feeds=feeds)


def _parse_outlines(element: ET.Element, feeds: list[OPMLFeed], category: str) -> None:
    """
    Recursively parse outline elements.

    OPML outlines can be:
    1. Feed entries (have xmlUrl attribute)
    2. Category folders (have children but no xmlUrl)
    """
    for outline in element.findall("outline"):
        xml_url = outline.get("xmlUrl") or outline.get("xmlurl")
        label = (outline.get("text") or outline.get("title") or "").strip()

        if xml_url:
            feeds.append(OPMLFeed(url=xml_url.strip(), title=label, category=category))
        else:
            _parse_outlines(outline, feeds, category=label or category)


def generate_opml(feeds: list[OPMLFeed], title: str = "termfeed subscriptions") -> str:
    """
    Generate OPML XML from a list of feeds.

    Feeds with categories are grouped into folders; uncategorized feeds
    come first.
    """
    root = ET.Element("opml", version="2.0")

    head = ET.SubElement(root, "head")
    title_elem = ET.SubElement(head, "title")
    title_elem.text = title

    body = ET.SubElement(root, "body")

    # Group feeds by category
    categorized: dict[str, list[OPMLFeed]] = {}
    for feed in feeds:
        categorized.setdefault(feed.category or "", []).append(feed)

    for feed in categorized.pop("", []):
        _add_feed_outline(body, feed)

    for category, cat_feeds in sorted(categorized.items()):
        folder = ET.SubElement(body, "outline", text=category, title=category)
        for feed in cat_feeds:
            _add_feed_outline(folder, feed)

    ET.indent(root)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(
        root, encoding="unicode"
    ) + "\n"


def _add_feed_outline(parent: ET.Element, feed: OPMLFeed) -> None:
    """Add a feed outline element to parent."""
    attrs = {
        "type": "rss",
        "xmlUrl": feed.url,
    }
    if feed.title:
        attrs["text"] = feed.title
        attrs["title"] = feed.title
    else:
        attrs["text"] = feed.url

    ET.SubElement(parent, "outline", **attrs)
