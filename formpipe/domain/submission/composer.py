"""Builds the notification email from sanitized submission fields."""

import html
import re
from dataclasses import dataclass
from typing import Mapping

from formpipe.domain.validation.sanitizer import nl2br

_TAG = re.compile(r"<[^>]*>")


@dataclass(frozen=True)
class ComposedEmail:
    subject: str
    reply_to: str
    html_body: str
    plain_text_body: str


def _label(field_name: str) -> str:
    return field_name[:1].upper() + field_name[1:]


def strip_tags(markup: str) -> str:
    return _TAG.sub("", markup)


def to_plain_text(markup: str) -> str:
    """Drop tags, then decode entities; escaped values read as typed."""
    return html.unescape(strip_tags(markup))


class EmailComposer:
    """Renders one `<p><strong>Label:</strong> value</p>` line per field.

    Values must already be HTML-escaped; the composer only adds markup and
    converts line breaks. The subject and plain-text body are not HTML, so
    both are decoded back to readable text.
    """

    def __init__(self, default_subject: str = "New Contact Form Submission"):
        self.default_subject = default_subject

    def build_html(self, fields: Mapping[str, str]) -> str:
        return "".join(
            f"<p><strong>{_label(key)}:</strong> {nl2br(value)}</p>\n" for key, value in fields.items()
        )

    def build_subject(self, fields: Mapping[str, str]) -> str:
        # A header value must stay on one line.
        subject = " ".join(html.unescape(fields.get("subject") or "").split())
        return subject or self.default_subject

    def compose(self, fields: Mapping[str, str]) -> ComposedEmail:
        html_body = self.build_html(fields)
        return ComposedEmail(
            subject=self.build_subject(fields),
            reply_to=fields.get("replyTo", ""),
            html_body=html_body,
            plain_text_body=to_plain_text(html_body),
        )
