"""Tests for prompt normalization."""

from __future__ import annotations

from ddgproxy.utils.messages import normalize_messages, resolve_content


class TestResolveContent:
    def test_string_is_verbatim(self):
        assert resolve_content("  hello ") == "  hello "

    def test_parts_concatenate_text_only(self):
        content = [
            {"type": "text", "text": "look at "},
            {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAA"}},
            {"type": "text", "text": "this"},
            "stray string",
        ]
        assert resolve_content(content) == "look at this"

    def test_unsupported_shape(self):
        assert resolve_content({"text": "hi"}) is None


class TestNormalizeMessages:
    def test_roles_rendered_in_order(self):
        messages = [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello!"},
            {"role": "user", "content": "How are you?"},
        ]
        assert normalize_messages(messages) == "user: Hi\nassistant: Hello!\nuser: How are you?"

    def test_system_becomes_user(self):
        messages = [
            {"role": "system", "content": "Be terse."},
            {"role": "user", "content": "Hi"},
        ]
        assert normalize_messages(messages) == "user: Be terse.\nuser: Hi"

    def test_blank_turns_dropped(self):
        messages = [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "   \n\t"},
            {"role": "user", "content": ""},
            {"role": "user", "content": [{"type": "text", "text": "  "}]},
            {"role": "user", "content": "last"},
        ]
        assert normalize_messages(messages) == "user: first\nuser: last"

    def test_invalid_roles_and_shapes_skipped(self):
        messages = [
            {"role": "tool", "content": "result"},
            {"role": "function", "content": "x"},
            {"content": "no role"},
            {"role": "user"},
            "not a turn",
            None,
            {"role": "user", "content": "kept"},
        ]
        assert normalize_messages(messages) == "user: kept"

    def test_multipart_content(self):
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Describe "},
                    {"type": "image_url", "image_url": {"url": "https://example.com/a.png"}},
                    {"type": "text", "text": "the picture"},
                ],
            }
        ]
        assert normalize_messages(messages) == "user: Describe the picture"

    def test_text_is_not_trimmed_when_rendered(self):
        assert normalize_messages([{"role": "user", "content": " padded "}]) == "user:  padded "

    def test_nothing_survives(self):
        assert normalize_messages([{"role": "user", "content": " "}]) == ""
        assert normalize_messages([]) == ""
