from datetime import date, datetime

from recommendations import resolve
from report_content import (
    DatesSection,
    NoteSection,
    build_report_content,
    format_long_date,
    normalize_dates,
    numbered_dates,
    reference_for,
)
from tests.conftest import FIXED_NOW


def test_dates_sorted_unique_and_numbered():
    raw = [date(2025, 12, 24), datetime(2025, 6, 1, 9, 30), date(2025, 6, 1), date(2025, 9, 15)]

    assert normalize_dates(raw) == [date(2025, 6, 1), date(2025, 9, 15), date(2025, 12, 24)]
    assert numbered_dates(raw) == [
        "1. Sunday, June 1, 2025",
        "2. Monday, September 15, 2025",
        "3. Wednesday, December 24, 2025",
    ]


def test_long_date_has_no_padding():
    assert format_long_date(date(2025, 3, 3)) == "Monday, March 3, 2025"


def test_reference_comes_from_time():
    assert reference_for(FIXED_NOW) == "MKH-140509"


def test_sections_in_order(form, dates):
    rec = resolve(form.profile())
    content = build_report_content(form, rec, rec.image_paths[:4], dates, FIXED_NOW)

    assert [s.key for s in content.sections] == [
        "summary", "personal", "analysis", "preferences", "recommendation", "images", "dates", "disclaimer",
    ]
    assert content.client_name == "Jane Doe"
    summary = dict(content.section("summary").fields)
    assert summary["Reference"] == "MKH-140509"
    assert summary["Report generated on"] == "Monday, March 3, 2025 at 2:05 PM"

    dates_section = content.section("dates")
    assert isinstance(dates_section, DatesSection)
    assert dates_section.total_line == "Total appointments scheduled: 3"


def test_blank_answers_are_labelled(form):
    form.phone = ""
    form.eye_color = ""
    form.special_occasions = []
    content = build_report_content(form, None, [], [], FIXED_NOW)

    assert dict(content.section("personal").fields)["Phone"] == "Not provided"
    assert dict(content.section("analysis").fields)["Eye Color"] == "Not specified"
    assert dict(content.section("preferences").fields)["Special Occasions"] == "Not specified"


def test_no_recommendation_gives_note_and_no_images(form):
    content = build_report_content(form, None, [], [], FIXED_NOW)

    assert isinstance(content.section("recommendation"), NoteSection)
    assert content.section("images") is None
    assert content.section("dates") is None


def test_ordered_skips_missing_sections(form):
    content = build_report_content(form, None, [], [], FIXED_NOW)
    keys = [s.key for s in content.ordered(("disclaimer", "dates", "summary"))]
    assert keys == ["disclaimer", "summary"]
