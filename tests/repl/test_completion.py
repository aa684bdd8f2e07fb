"""Tests for REPL tab completion."""

from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document

from dbc.repl import DbcCompleter


def complete(completer, text):
    document = Document(text, cursor_position=len(text))
    return [c.text for c in completer.get_completions(document, CompleteEvent())]


class TestDbcCompleter:
    """Tests for completion candidates."""

    def setup_method(self):
        self.completer = DbcCompleter(["orders", "customers", "order_items"], ["locks", "sessions"])

    def test_standard_queries(self):
        assert complete(self.completer, "@lo") == ["@locks"]
        assert complete(self.completer, "@") == ["@locks", "@sessions"]

    def test_meta_commands(self):
        assert complete(self.completer, ":de") == [":describe", ":desc"]

    def test_table_names_then_keywords(self):
        assert complete(self.completer, "select * from ord") == ["order_items", "orders", "order"]

    def test_keywords_match_case_insensitively(self):
        assert "select" in complete(self.completer, "SEL")

    def test_nothing_before_cursor(self):
        assert complete(self.completer, "select ") == []

    def test_start_position_replaces_word(self):
        document = Document("@se", cursor_position=3)
        completion = next(iter(self.completer.get_completions(document, CompleteEvent())))

        assert completion.start_position == -3
