"""Tests for the notification email composer."""

import pytest

from formpipe.domain.submission.composer import EmailComposer, strip_tags, to_plain_text


pytestmark = pytest.mark.unit


class TestEmailComposer:
    def test_html_has_one_paragraph_per_field(self):
        composer = EmailComposer()
        html = composer.build_html({"replyTo": "a@example.com", "message": "line one\nline two"})
        assert html == (
            "<p><strong>ReplyTo:</strong> a@example.com</p>\n"
            "<p><strong>Message:</strong> line one<br />\nline two</p>\n"
        )

    def test_compose_uses_subject_field_and_plain_text(self):
        email = EmailComposer().compose(
            {"replyTo": "a@example.com", "subject": "Quote &amp; timeline", "message": "&lt;b&gt;now&lt;/b&gt;"}
        )
        assert email.subject == "Quote & timeline"
        assert email.reply_to == "a@example.com"
        assert "Quote &amp; timeline" in email.html_body
        assert "<strong>" not in email.plain_text_body
        assert "Subject: Quote & timeline\n" in email.plain_text_body
        assert "Message: <b>now</b>\n" in email.plain_text_body

    def test_subject_is_kept_on_one_line(self):
        email = EmailComposer().compose({"replyTo": "a@example.com", "subject": "Hello\r\nBcc: x@example.com"})
        assert email.subject == "Hello Bcc: x@example.com"

    def test_default_subject_when_missing_or_empty(self):
        composer = EmailComposer(default_subject="New message")
        assert composer.compose({"replyTo": "a@example.com"}).subject == "New message"
        assert composer.compose({"replyTo": "a@example.com", "subject": ""}).subject == "New message"
        assert composer.compose({"replyTo": "a@example.com", "subject": "  \n "}).subject == "New message"

    def test_strip_tags(self):
        assert strip_tags("<p><strong>A:</strong> b<br />\n</p>") == "A: b\n"

    def test_plain_text_decodes_entities_once(self):
        assert to_plain_text("<p>Tom &amp;amp; Jerry</p>") == "Tom &amp; Jerry"
