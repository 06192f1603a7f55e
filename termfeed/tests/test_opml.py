"""
Tests for OPML parsing/generation and FeedService import/export.
"""

import pytest

from termfeed.exceptions import OPMLImportError
from termfeed.opml import OPMLFeed, generate_opml, parse_opml
from termfeed.services.feed_service import FeedService

SAMPLE_OPML = """<?xml version="1.0" encoding="UTF-8"?>
<opml version="2.0">
  <head><title>My Subscriptions</title></head>
  <body>
    <outline text="Loose Feed" type="rss" xmlUrl="https://loose.example/feed"/>
    <outline text="Tech" title="Tech">
      <outline text="Tech Blog" type="rss" xmlUrl="https://tech.example/rss"/>
      <outline text="Languages">
        <outline title="Python Weekly" type="rss" xmlUrl="https://python.example/feed"/>
      </outline>
    </outline>
    <outline text="Empty folder"/>
  </body>
</opml>
"""


class TestParseOpml:

    def test_flat_and_nested_outlines(self):
        doc = parse_opml(SAMPLE_OPML)
        assert doc.title == "My Subscriptions"
        assert doc.feeds == [
            OPMLFeed(url="https://loose.example/feed", title="Loose Feed", category=""),
            OPMLFeed(url="https://tech.example/rss", title="Tech Blog", category="Tech"),
            OPMLFeed(url="https://python.example/feed", title="Python Weekly", category="Languages"),
        ]

    def test_invalid_xml(self):
        with pytest.raises(ValueError, match="Invalid XML"):
            parse_opml("<opml><body>")

    def test_not_opml(self):
        with pytest.raises(ValueError, match="Not an OPML document"):
            parse_opml("<rss><channel/></rss>")

    def test_missing_body(self):
        with pytest.raises(ValueError, match="missing <body>"):
            parse_opml("<opml><head/></opml>")


class TestGenerateOpml:

    def test_groups_by_category(self):
        xml = generate_opml([
            OPMLFeed(url="https://b.example/feed", title="B", category="News"),
            OPMLFeed(url="https://a.example/feed", title="", category=""),
        ], title="Export")

        doc = parse_opml(xml)
        assert doc.title == "Export"
        assert doc.feeds == [
            OPMLFeed(url="https://a.example/feed", title="https://a.example/feed", category=""),
            OPMLFeed(url="https://b.example/feed", title="B", category="News"),
        ]


class TestImportOpml:

    @pytest.fixture
    def service(self, test_db, feed_parser):
        return FeedService(test_db, feed_parser)

    def test_import_adds_feeds_without_fetching(self, service, test_db, feed_parser):
        result = service.import_opml(SAMPLE_OPML)

        assert result.added == 3
        assert result.skipped == 0
        assert result.errors == []
        assert feed_parser.calls == []

        feed = test_db.get_feed_by_url("https://tech.example/rss")
        assert feed.title == "Tech Blog"
        assert feed.category == "Tech"
        assert feed.description == ""

    def test_existing_urls_are_skipped(self, service, test_db):
        test_db.add_feed(url="https://tech.example/rss", title="Mine", category="Custom")

        result = service.import_opml(SAMPLE_OPML)

        assert result.added == 2
        assert result.skipped == 1
        # Existing subscription left as it was
        assert test_db.get_feed_by_url("https://tech.example/rss").title == "Mine"

    def test_import_twice(self, service):
        service.import_opml(SAMPLE_OPML)
        result = service.import_opml(SAMPLE_OPML)
        assert (result.added, result.skipped) == (0, 3)

    def test_invalid_content(self, service):
        with pytest.raises(OPMLImportError):
            service.import_opml("<html><body>nope</body></html>")

    def test_import_file(self, service, tmp_path):
        path = tmp_path / "subs.opml"
        path.write_text(SAMPLE_OPML, encoding="utf-8")
        assert service.import_opml_file(path).added == 3

    def test_import_missing_file(self, service, tmp_path):
        with pytest.raises(OPMLImportError, match="Failed to read OPML file"):
            service.import_opml_file(tmp_path / "missing.opml")

    def test_export_round_trip(self, service, test_db):
        service.import_opml(SAMPLE_OPML)
        doc = parse_opml(service.export_opml(title="Backup"))
        assert doc.title == "Backup"
        assert {(f.url, f.category) for f in doc.feeds} == {
            ("https://loose.example/feed", ""),
            ("https://tech.example/rss", "Tech"),
            ("https://python.example/feed", "Languages"),
        }
