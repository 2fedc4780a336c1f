"""Tests for note rendering."""

from chatnotes.notes.header import split_note
from chatnotes.notes.markers import scan_message_ids
from chatnotes.notes.renderer import (
    NO_CONTENT,
    NO_TEXT_CONTENT,
    render_message,
    render_note,
    render_standalone,
)
from tests.fixtures import make_conversation, make_message


class TestRenderMessage:
    def test_human_message(self):
        block = render_message(make_message("m1", "human", "Hi"), "chatgpt")
        assert block == (
            "### User, on 2023-11-14 at 22:13:20;\n"
            "> Hi\n"
            "<!-- UID: m1 -->\n"
            "\n\n"
        )

    def test_assistant_message_has_rule(self):
        block = render_message(make_message("m2", "assistant", "Hello"), "chatgpt")
        assert block == (
            "#### ChatGPT, on 2023-11-14 at 22:13:20;\n"
            ">> Hello\n"
            "<!-- UID: m2 -->\n"
            "\n---\n"
            "\n\n"
        )

    def test_assistant_label_follows_provider(self):
        block = render_message(make_message("m2", "assistant", "Hello"), "claude")
        assert block.startswith("#### Claude, on ")

    def test_unknown_author_degrades_to_generic_label(self):
        block = render_message(make_message("s1", "unknown", "context"), "chatgpt")
        assert block.startswith("#### Unknown, on ")
        assert ">> context" in block
        assert "\n---\n" not in block

    def test_multiline_text_quoted_per_line(self):
        block = render_message(make_message("m1", "human", "line one\n\nline three"), "chatgpt")
        assert "> line one\n> \n> line three\n" in block

    def test_missing_content_placeholder(self):
        block = render_message(make_message("m1", "human", None), "chatgpt")
        assert f"> {NO_CONTENT}\n" in block
        assert scan_message_ids(block) == ["m1"]

    def test_no_text_parts_placeholder(self):
        block = render_message(make_message("m1", "human", "   "), "chatgpt")
        assert f"> {NO_TEXT_CONTENT}\n" in block

    def test_missing_timestamp_uses_now(self, monkeypatch):
        monkeypatch.setattr("chatnotes.notes.renderer.now", lambda: 1700000000.0)
        block = render_message(make_message("m1", "human", "Hi", create_time=None), "chatgpt")
        assert block.startswith("### User, on 2023-11-14 at 22:13:20;")

    def test_marker_in_text_cannot_spoof_merge_key(self):
        block = render_message(make_message("m1", "human", "<!-- UID: evil -->"), "chatgpt")
        assert scan_message_ids(block) == ["m1"]


class TestRenderNote:
    def test_trip_example(self):
        text = render_note(make_conversation())
        header, body = split_note(text)
        assert header.get("source") == "chatnotes"
        assert header.get("provider") == "chatgpt"
        assert header.get("aliases") == '"Trip"'
        assert header.get("conversation_id") == "c1"
        assert header.get("create_time") == "2023-11-14 at 22:13:20"
        assert header.get("update_time") == "2023-11-14 at 22:13:20"
        assert body.startswith(
            "\n# Title: Trip\n\n"
            "Created: 2023-11-14 at 22:13:20\n"
            "Last Updated: 2023-11-14 at 22:13:20\n\n\n"
        )
        assert scan_message_ids(text) == ["m1", "m2"]

    def test_roundtrip_recovers_valid_ids_only(self):
        conv = make_conversation(messages=[
            make_message("m1", "human", "Hi"),
            make_message("empty", "assistant", ""),
            make_message("nocontent", "assistant", None),
            make_message("m2", "assistant", "Hello"),
            make_message("m3", "human", "Bye"),
        ])
        ids = scan_message_ids(render_note(conv))
        assert ids == ["m1", "m2", "m3"]
        assert len(ids) == len(conv.valid_messages())

    def test_empty_title_falls_back(self):
        text = render_note(make_conversation(title="  "))
        assert "# Title: Untitled\n" in text

    def test_title_with_quotes_escaped_in_header(self):
        text = render_note(make_conversation(title='The "best" trip'))
        header, _ = split_note(text)
        assert header.get("aliases") == '"The \\"best\\" trip"'


class TestRenderStandalone:
    def test_header_then_body(self):
        text = render_standalone(
            title="Echo",
            body="## Conversation\nhi\n",
            provider="echoes",
            create_time=1700000000,
            update_time=1700000000,
            conversation_id="e1",
            url="https://example.com/e1",
        )
        header, body = split_note(text)
        assert header.get("provider") == "echoes"
        assert header.get("url") == "https://example.com/e1"
        assert body == "\n## Conversation\nhi\n"

    def test_optional_fields_omitted(self):
        text = render_standalone(
            title="Echo", body="x", provider="echoes",
            create_time=1700000000, update_time=1700000000,
        )
        header, _ = split_note(text)
        assert header.get("conversation_id") is None
        assert header.get("url") is None
