"""
Tests for the command-line front end.

Commands that touch the network are given a FakeFeedParser by patching
FeedParser in the cli module.
"""

import sqlite3

import pytest

from termfeed import cli
from termfeed.database import Database

from .factories import FakeFeedParser, make_feed, make_item

FEED_URL = "https://example.com/feed.xml"


@pytest.fixture
def fake_parser(monkeypatch):
    parser = FakeFeedParser()
    monkeypatch.setattr(cli, "FeedParser", lambda: parser)
    return parser


@pytest.fixture
def run(temp_db_path, capsys):
    """Run the CLI against the temp database; returns (exit_code, stdout, stderr)."""
    def _run(*argv):
        code = cli.main(["--db", str(temp_db_path), *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err
    return _run


class TestCli:

    def test_list_empty(self, run):
        code, out, _ = run("list")
        assert code == 0
        assert "No feeds. Use: termfeed add <url>" in out

    def test_add_and_list(self, run, fake_parser):
        fake_parser.add(FEED_URL, make_feed(FEED_URL, [make_item("g1")], title="Blog"))

        code, out, _ = run("add", FEED_URL, "--category", "Tech")
        assert code == 0
        assert "Added: Blog" in out

        code, out, _ = run("list")
        assert "Blog" in out
        assert "Tech" in out

    def test_add_failure_exits_nonzero(self, run, fake_parser):
        code, out, err = run("add", "https://down.example/feed")
        assert code == 1
        assert "Error:" in err

    def test_refresh_reports_counts_and_errors(self, run, fake_parser, temp_db_path):
        db = Database(temp_db_path)
        good = db.add_feed(url="https://a.example/feed", title="A")
        db.add_feed(url="https://b.example/feed", title="B")
        fake_parser.add(good.url, make_feed(good.url, [make_item("a1"), make_item("a2")]))

        code, out, _ = run("refresh")

        assert code == 0
        assert "Refreshed 2 feeds, 2 new articles" in out
        assert "Cannot connect" in out

    def test_import_and_export(self, run, tmp_path):
        opml = tmp_path / "subs.opml"
        opml.write_text(
            '<opml version="2.0"><body>'
            '<outline text="One" xmlUrl="https://one.example/feed"/>'
            '</body></opml>',
            encoding="utf-8",
        )

        code, out, _ = run("import", str(opml))
        assert code == 0
        assert "Imported: 1 added, 0 skipped" in out

        exported = tmp_path / "out.opml"
        code, _, _ = run("export", "-o", str(exported))
        assert code == 0
        assert "https://one.example/feed" in exported.read_text(encoding="utf-8")

    def test_import_missing_file(self, run, tmp_path):
        code, _, err = run("import", str(tmp_path / "nope.opml"))
        assert code == 1
        assert "Failed to read OPML file" in err

    def test_read_star_and_search(self, run, temp_db_path):
        db = Database(temp_db_path)
        feed = db.add_feed(url=FEED_URL, title="Blog")
        article = db.upsert_article(
            feed_id=feed.id, guid="g1", title="Powerful search", summary="All about FTS"
        )

        code, out, _ = run("read", str(article.id))
        assert code == 0
        assert "All about FTS" in out
        assert db.get_article(article.id).is_read is True

        code, out, _ = run("star", str(article.id))
        assert "Starred article" in out
        assert db.get_article(article.id).is_starred is True

        code, out, _ = run("search", "power")
        assert code == 0
        assert "Powerful search" in out

    def test_search_no_matches(self, run):
        code, out, _ = run("search", "***")
        assert code == 0
        assert "No matches." in out

    def test_search_with_punctuation(self, run, db_with_data_path):
        code, out, err = run("search", "don't", "node.js", "NOT")
        assert code == 0
        assert err == ""
        assert "No matches." in out

    def test_database_error_exits_nonzero(self, run, monkeypatch):
        def locked(self, query, limit=None):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(cli.SearchService, "search_articles", locked)

        code, out, err = run("search", "anything")

        assert code == 1
        assert "Error: database error: database is locked" in err
        assert out == ""

    def test_unopenable_database_exits_nonzero(self, tmp_path, capsys):
        code = cli.main(["--db", str(tmp_path), "list"])
        assert code == 1
        assert "Error: database error:" in capsys.readouterr().err

    def test_mark_read_and_remove(self, run, db_with_data_path):
        path, data = db_with_data_path
        code, out, _ = run("mark-read", str(data["feed_id"]))
        assert code == 0
        assert Database(path).articles.get_unread_count(data["feed_id"]) == 0

        code, out, _ = run("remove", str(data["feed_id"]))
        assert code == 0
        assert "Removed: Example Feed" in out
        assert Database(path).get_feeds() == []

    def test_unknown_ids(self, run):
        assert run("remove", "77")[0] == 1
        assert run("star", "77")[0] == 1
        code, _, err = run("mark-read", "77")
        assert code == 1
        assert "Feed 77 not found" in err

    def test_tag(self, run, db_with_data_path):
        path, data = db_with_data_path
        article_id = data["article_ids"][1]
        code, _, _ = run("tag", str(article_id), "later")
        assert code == 0
        assert [t.name for t in Database(path).get_article_tags(article_id)] == ["later"]


@pytest.fixture
def db_with_data_path(temp_db_path, db_with_data):
    _, data = db_with_data
    return temp_db_path, data
