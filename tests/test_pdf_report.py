from datetime import date, timedelta
from io import BytesIO

import pytest
from pypdf import PdfReader

import pdf_report
from images import ImageSlot, MaterializedImage
from pdf_report import (
    BOTTOM_MARGIN,
    PAGE_HEIGHT,
    FlowingCursor,
    ReportRenderError,
    render_pdf,
    report_filename,
)
from recommendations import report_images, resolve
from report_content import build_report_content
from tests.conftest import FIXED_NOW


def _text(data):
    reader = PdfReader(BytesIO(data))
    return [page.extract_text() for page in reader.pages]


@pytest.fixture
def content(form, dates):
    rec = resolve(form.profile())
    return build_report_content(form, rec, report_images(form.profile()), dates, FIXED_NOW)


@pytest.fixture
def slots(content, png):
    paths = content.section("images").paths
    return [ImageSlot(p, MaterializedImage(png, "image/png", p.rsplit("/", 1)[-1])) for p in paths]


def test_renders_pdf(content, slots):
    data = render_pdf(content, slots)
    assert data.startswith(b"%PDF")


def test_sections_in_reading_order(content, slots):
    text = "\n".join(_text(render_pdf(content, slots)))
    headings = [
        "MKH Hair Color Analysis",
        "Client Summary",
        "Personal Information",
        "Hair Analysis Profile",
        "Professional Recommendations",
        "Recommended Style Visuals",
        "Scheduled Perfect Hair Days",
        "Disclaimer",
    ]
    positions = [text.index(h) for h in headings]
    assert positions == sorted(positions)

    dates_at = [text.index(d) for d in ("June 1, 2025", "September 15, 2025", "December 24, 2025")]
    assert dates_at == sorted(dates_at)
    assert "Money piece with Balayage: every 12 weeks" in text
    assert "Style 4" in text
    assert "Style 5" not in text


def test_every_page_has_footer(content, slots):
    pages = _text(render_pdf(content, slots))
    total = len(pages)
    assert total >= 2
    for number, page in enumerate(pages, start=1):
        assert f"Page {number} of {total}" in page


def test_failed_image_draws_placeholder(content, slots, png):
    slots[1] = ImageSlot(slots[1].path, None)
    slots[2] = ImageSlot(slots[2].path, MaterializedImage(b"not an image", "image/jpeg", "broken.jpg"))

    text = "\n".join(_text(render_pdf(content, slots)))
    assert text.count("Image Preview") == 2


def test_same_input_same_bytes(content, slots):
    first = render_pdf(content, slots, invariant=True)
    second = render_pdf(content, slots, invariant=True)
    assert first == second


def test_many_dates_flow_onto_new_pages(form):
    many = [date(2026, 1, 1) + timedelta(days=i) for i in range(80)]
    content = build_report_content(form, resolve(form.profile()), [], many, FIXED_NOW)

    pages = _text(render_pdf(content))
    text = "\n".join(pages)
    assert "80. " in text
    assert "Total appointments scheduled: 80" in text
    assert len(pages) >= 4


def test_render_failure_is_wrapped(content, monkeypatch):
    def broken(self):
        raise RuntimeError("disk full")

    monkeypatch.setattr(pdf_report.ConsultationReport, "render", broken)
    with pytest.raises(ReportRenderError, match="Failed to generate PDF. Please try again."):
        render_pdf(content)


def test_filename():
    assert report_filename("Jane", "Doe", date(2025, 3, 3)) == "MKH_Hair_Analysis_Jane_Doe_20250303.pdf"


class _Recorder:
    def __init__(self):
        self.pages = 0

    def showPage(self):
        self.pages += 1


def test_cursor_breaks_before_bottom_margin():
    pdf = _Recorder()
    repaints = []
    cursor = FlowingCursor(pdf, on_new_page=repaints.append)
    limit = PAGE_HEIGHT - BOTTOM_MARGIN

    cursor.y = limit - 5
    y = cursor.append_block(6)

    assert pdf.pages == 1
    assert cursor.page == 2
    assert y == cursor.top
    assert repaints == [pdf]


def test_cursor_keeps_block_that_fits():
    cursor = FlowingCursor(_Recorder())
    cursor.y = 100
    assert cursor.append_block(6) == 100
    assert cursor.y == 106
    assert cursor.page == 1


def test_oversized_block_at_top_does_not_loop():
    pdf = _Recorder()
    cursor = FlowingCursor(pdf)
    cursor.append_block(PAGE_HEIGHT * 2)
    assert pdf.pages == 0
