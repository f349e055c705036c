import re

import pytest

from email_report import render_dates_email, render_email
from images import ImageSlot, MaterializedImage
from recommendations import report_images, resolve
from report_content import build_report_content
from tests.conftest import FIXED_NOW


@pytest.fixture
def content(form, dates):
    return build_report_content(form, resolve(form.profile()), report_images(form.profile()), dates, FIXED_NOW)


def _slots(content, png, failed=()):
    slots = []
    for i, path in enumerate(content.section("images").paths):
        image = None if i in failed else MaterializedImage(png, "image/png", path.rsplit("/", 1)[-1])
        slots.append(ImageSlot(path, image))
    return slots


def test_every_cid_has_an_attachment(content, png):
    composed = render_email(content, _slots(content, png))

    cids = re.findall(r'src="cid:([^"]+)"', composed.html)
    assert cids == ["image_0_mbt1jpg", "image_1_mbt2jpg", "image_2_mbt3jpg", "image_3_mbt4jpg"]
    assert [a.content_id for a in composed.attachments] == cids
    assert all(a.data == png and a.mime_type == "image/png" for a in composed.attachments)


def test_failed_image_gets_placeholder(content, png):
    composed = render_email(content, _slots(content, png, failed={1}))

    assert composed.html.count("<img") == 3
    assert composed.html.count("Image Preview") == 1
    assert [a.content_id for a in composed.attachments] == ["image_0_mbt1jpg", "image_2_mbt3jpg", "image_3_mbt4jpg"]


def test_no_images(content):
    composed = render_email(content, [])
    assert "No images available for this style" in composed.html
    assert composed.attachments == []


def test_dates_ascending_and_numbered(content):
    html = render_email(content, []).html
    first = html.index("1. Sunday, June 1, 2025")
    second = html.index("2. Monday, September 15, 2025")
    third = html.index("3. Wednesday, December 24, 2025")
    assert first < second < third
    assert "Total appointments scheduled: 3" in html


def test_sections_and_text_fallback(content):
    composed = render_email(content, [])

    order = ["Personal Information", "Hair Analysis Profile", "Professional Recommendations",
             "Preferences &amp; Lifestyle", "Scheduled Perfect Hair Days", "Disclaimer"]
    positions = [composed.html.index(title) for title in order]
    assert positions == sorted(positions)
    assert composed.subject == "Your Hair Consultation Form Submission"
    assert "Recommended Style: Medium Hair Trendy" in composed.text
    assert "3. Wednesday, December 24, 2025" in composed.text


def test_answers_are_escaped(form, dates):
    form.first_name = "<script>alert(1)</script>"
    content = build_report_content(form, None, [], dates, FIXED_NOW)

    html = render_email(content, []).html
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_dates_email(content):
    composed = render_dates_email(content)

    assert composed.subject == "Your Perfect Hair Days"
    assert composed.attachments == []
    assert "Hi Jane," in composed.html
    assert "1. Sunday, June 1, 2025" in composed.html
    assert "Hair Analysis Profile" not in composed.html
    assert composed.text.startswith("Hi Jane,")
