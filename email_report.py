"""
HTML email version of the consultation report.

Same sections as the PDF, laid out as one flowing page. Style photos travel
as inline attachments and are referenced from the HTML with cid: URLs.
"""
import html
from typing import List, NamedTuple, Sequence

import client_settings as cs
from images import ImageSlot, content_id_for
from recommendations import MAX_REPORT_IMAGES
from report_content import (
    DatesSection,
    FieldsSection,
    ImageSection,
    NoteSection,
    RecommendationSection,
    ReportContent,
)

SECTION_ORDER = ("personal", "analysis", "recommendation", "images", "preferences", "dates", "disclaimer")


class EmailAttachment(NamedTuple):
    content_id: str
    filename: str
    data: bytes
    mime_type: str


class ComposedEmail(NamedTuple):
    subject: str
    html: str
    text: str
    attachments: List[EmailAttachment]


# ── HTML helpers ───────────────────────────────────────────────────────────────

_WRAPPER = (
    'style="font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; '
    'background: #000000; color: #ffffff; padding: 40px; border-radius: 20px;"'
)
_CARD = (
    'style="background: rgba(255, 255, 255, 0.08); border-radius: 15px; '
    'padding: 30px; margin-bottom: 30px;"'
)
_H2 = f'style="color: {cs.PRIMARY_COLOR}; margin: 0 0 20px 0; font-size: 24px;"'
_MUTED = 'style="color: rgba(255, 255, 255, 0.7); font-size: 13px;"'
_TILE = (
    'style="display: inline-block; width: 46%; margin: 1%; vertical-align: top; '
    'text-align: center;"'
)
_IMG = 'style="width: 100%; max-width: 340px; height: auto; border-radius: 10px;"'
_PLACEHOLDER = (
    'style="background: #323232; color: #FF7F50; border-radius: 10px; '
    'padding: 60px 0; font-size: 14px;"'
)


def _e(value) -> str:
    return html.escape(str(value))


def _card(title: str, body: str) -> str:
    return f"<div {_CARD}><h2 {_H2}>{_e(title)}</h2>{body}</div>"


def _fields_html(section: FieldsSection) -> str:
    rows = "".join(
        f'<tr><td style="padding: 6px 12px 6px 0; font-weight: bold; vertical-align: top;">{_e(f.label)}:</td>'
        f'<td style="padding: 6px 0;">{_e(f.value)}</td></tr>'
        for f in section.fields
    )
    return _card(section.title, f'<table style="width: 100%; border-collapse: collapse; color: #ffffff;">{rows}</table>')


def _recommendation_html(section: RecommendationSection) -> str:
    bullets = "".join(f"<li>{_e(item)}</li>" for item in section.schedule)
    body = (
        f'<h3 style="color: #ffffff; margin-top: 0;">Recommended Style: {_e(section.style_title)}</h3>'
        f"<p><strong>Recommended Treatments:</strong><br>{_e(section.treatments)}</p>"
        f"<p><strong>Hair Care Routine:</strong><br>{_e(section.care)}</p>"
        f"<p><strong>Maintenance Schedule:</strong></p><ul>{bullets}</ul>"
    )
    return _card(section.title, body)


def _images_html(section: ImageSection, slots: Sequence[ImageSlot], attachments: List[EmailAttachment]) -> str:
    if not slots:
        return _card(section.title, f'<p {_MUTED}>💇‍♀️ {_e(section.empty_text)}</p>')

    tiles = []
    for index, slot in enumerate(slots):
        caption = f"Style {index + 1}"
        if slot.ok:
            cid = content_id_for(index, slot.image.filename)
            attachments.append(EmailAttachment(cid, slot.image.filename, slot.image.data, slot.image.mime_type))
            inner = f'<img src="cid:{cid}" alt="{_e(caption)}" {_IMG}>'
        else:
            inner = f"<div {_PLACEHOLDER}>💇‍♀️ Image Preview</div>"
        tiles.append(f'<div {_TILE}>{inner}<p style="margin: 8px 0 0 0;">{_e(caption)}</p></div>')
    return _card(section.title, "".join(tiles))


def _dates_html(section: DatesSection) -> str:
    items = "".join(f'<li style="list-style: none; margin-bottom: 6px;">{_e(entry)}</li>' for entry in section.entries)
    body = (
        f'<p style="color: rgba(255, 255, 255, 0.8);">{_e(section.intro)}</p>'
        f'<ul style="margin: 0; padding-left: 0;">{items}</ul>'
        f'<p style="margin-top: 15px;"><strong>{_e(section.total_line)}</strong></p>'
        f'<p {_MUTED}><em>{_e(section.reminder)}</em></p>'
    )
    return _card(section.title, body)


def _note_html(section: NoteSection) -> str:
    return _card(section.title, f"<p {_MUTED}>{_e(section.text)}</p>")


def _footer_html() -> str:
    return (
        '<div style="text-align: center; margin-top: 30px; padding-top: 20px; '
        'border-top: 1px solid rgba(255, 255, 255, 0.2);">'
        f"<p {_MUTED}>{_e(cs.THANK_YOU_TEXT)}</p>"
        f'<p style="color: rgba(255, 255, 255, 0.5); font-size: 12px;">{_e(cs.FOOTER_TEXT)}</p>'
        "</div>"
    )


def _page(title: str, subtitle: str, cards: str) -> str:
    return (
        f"<div {_WRAPPER}>"
        f'<h1 style="color: {cs.PRIMARY_COLOR}; text-align: center; margin-bottom: 6px; font-size: 32px;">{_e(title)}</h1>'
        f'<p style="text-align: center; margin-top: 0; margin-bottom: 30px;">{_e(subtitle)}</p>'
        f"{cards}{_footer_html()}</div>"
    )


# ── Plain text fallback ────────────────────────────────────────────────────────

def _section_text(section) -> List[str]:
    lines = [section.title.upper()]
    if isinstance(section, FieldsSection):
        lines += [f"{f.label}: {f.value}" for f in section.fields]
    elif isinstance(section, RecommendationSection):
        lines += [f"Recommended Style: {section.style_title}", section.treatments, section.care]
        lines += [f"- {item}" for item in section.schedule]
    elif isinstance(section, ImageSection):
        lines.append(f"{min(len(section.paths), MAX_REPORT_IMAGES)} style photo(s) shown in the HTML version.")
    elif isinstance(section, DatesSection):
        lines += [section.intro, *section.entries, section.total_line]
    elif isinstance(section, NoteSection):
        lines.append(section.text)
    return lines + [""]


def _text(content: ReportContent, keys: Sequence[str]) -> str:
    lines = [content.title, content.subtitle, ""]
    for section in content.ordered(keys):
        lines += _section_text(section)
    return "\n".join(lines)


# ── Public API ─────────────────────────────────────────────────────────────────

def render_email(content: ReportContent, image_slots: Sequence[ImageSlot] = ()) -> ComposedEmail:
    """
    Build the full consultation email.
    Every cid: in the HTML has a matching entry in attachments; failed images
    get a placeholder tile instead of an <img>.
    """
    slots = list(image_slots)[:MAX_REPORT_IMAGES]
    attachments: List[EmailAttachment] = []
    cards = []
    for section in content.ordered(SECTION_ORDER):
        if isinstance(section, FieldsSection):
            cards.append(_fields_html(section))
        elif isinstance(section, RecommendationSection):
            cards.append(_recommendation_html(section))
        elif isinstance(section, ImageSection):
            cards.append(_images_html(section, slots, attachments))
        elif isinstance(section, DatesSection):
            cards.append(_dates_html(section))
        elif isinstance(section, NoteSection):
            cards.append(_note_html(section))

    return ComposedEmail(
        subject=cs.EMAIL_SUBJECT,
        html=_page(content.title, content.subtitle, "".join(cards)),
        text=_text(content, SECTION_ORDER),
        attachments=attachments,
    )


def render_dates_email(content: ReportContent) -> ComposedEmail:
    """Short confirmation that only lists the selected dates."""
    dates = content.section("dates")
    greeting = f"Hi {content.first_name}," if content.first_name else "Hi,"
    cards = f"<p>{_e(greeting)}</p><p>Thanks for sharing your perfect hair days with us.</p>"
    if dates is not None:
        cards += _dates_html(dates)
    return ComposedEmail(
        subject=cs.DATES_EMAIL_SUBJECT,
        html=_page(cs.DATES_EMAIL_SUBJECT, cs.CLIENT_NAME, cards),
        text="\n".join([greeting, "", *_section_text(dates)] if dates is not None else [greeting]),
        attachments=[],
    )
