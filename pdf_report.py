import logging
from datetime import date
from io import BytesIO
from typing import Callable, Optional, Sequence

from PIL import Image, UnidentifiedImageError
from reportlab.lib.colors import Color, HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

import client_settings as cs
from images import ImageSlot, MaterializedImage
from recommendations import MAX_REPORT_IMAGES
from report_content import (
    DatesSection,
    FieldsSection,
    ImageSection,
    NoteSection,
    RecommendationSection,
    ReportContent,
)

log = logging.getLogger(__name__)

RENDER_FAILED_MESSAGE = "Failed to generate PDF. Please try again."

# --- Page geometry (millimetres, measured from the top edge) ---
PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
MARGIN = 20.0
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
BOTTOM_MARGIN = 25.0          # keeps body text clear of the footer rule
HEADER_BOTTOM = 70.0
FOOTER_BASELINE = PAGE_HEIGHT - 15

LINE_HEIGHT = 6.0
ITEM_GAP = 2.0
SECTION_GAP = 10.0
HEADING_HEIGHT = 14.0

IMAGE_GAP = 10.0
CELL_WIDTH = (CONTENT_WIDTH - IMAGE_GAP) / 2
CELL_HEIGHT = 80.0
ROW_HEIGHT = CELL_HEIGHT + 25

# --- Fonts / colours ---
BODY_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
BODY_SIZE = 11
HEADING_SIZE = 18

CORAL = HexColor(cs.PRIMARY_COLOR)
WHITE = HexColor(cs.TEXT_COLOR)
BLACK = HexColor(cs.BACKGROUND_COLOR)
MUTED = HexColor(cs.MUTED_COLOR)
PLACEHOLDER_FILL = Color(50 / 255, 50 / 255, 50 / 255)


class ReportRenderError(Exception):
    """Raised when the PDF could not be produced. The message is safe to show."""


def _x(x_mm: float) -> float:
    return x_mm * mm


def _y(y_mm: float) -> float:
    # reportlab's origin is bottom-left
    return (PAGE_HEIGHT - y_mm) * mm


def paint_background(pdf: canvas.Canvas) -> None:
    pdf.setFillColor(BLACK)
    pdf.rect(0, 0, _x(PAGE_WIDTH), _x(PAGE_HEIGHT), stroke=0, fill=1)


def report_filename(first_name: str, last_name: str, on: date) -> str:
    return f"{cs.REPORT_PREFIX}_{first_name}_{last_name}_{on:%Y%m%d}.pdf"


class NumberedCanvas(canvas.Canvas):
    """Holds finished pages until save() so every footer can say "Page i of N"."""

    def __init__(self, *args, footer_text: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.footer_text = footer_text
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for number, state in enumerate(self._saved_page_states, start=1):
            self.__dict__.update(state)
            self.draw_footer(number, total)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def draw_footer(self, number: int, total: int) -> None:
        self.setStrokeColor(CORAL)
        self.setLineWidth(0.2 * mm)
        self.line(_x(MARGIN), _y(FOOTER_BASELINE - 5), _x(PAGE_WIDTH - MARGIN), _y(FOOTER_BASELINE - 5))
        self.setFont(BODY_FONT, 8)
        self.setFillColor(MUTED)
        self.drawString(_x(MARGIN), _y(FOOTER_BASELINE), self.footer_text)
        self.drawRightString(_x(PAGE_WIDTH - MARGIN), _y(FOOTER_BASELINE), f"Page {number} of {total}")


class FlowingCursor:
    """
    Vertical layout position for one document.

    append_block(height) hands back the y to draw at and moves past the block,
    starting a fresh page first when the block would cross the bottom margin.
    """

    def __init__(self, pdf: canvas.Canvas, top: float = MARGIN, limit: float = PAGE_HEIGHT - BOTTOM_MARGIN,
                 on_new_page: Optional[Callable[[canvas.Canvas], None]] = None):
        self.pdf = pdf
        self.top = top
        self.limit = limit
        self.on_new_page = on_new_page
        self.y = top
        self.page = 1

    def fits(self, height: float) -> bool:
        return self.y + height <= self.limit

    def new_page(self) -> None:
        self.pdf.showPage()
        self.page += 1
        self.y = self.top
        if self.on_new_page:
            self.on_new_page(self.pdf)

    def ensure_space(self, height: float) -> None:
        # A block taller than a whole page is drawn anyway rather than looping.
        if not self.fits(height) and self.y > self.top:
            self.new_page()

    def append_block(self, height: float) -> float:
        self.ensure_space(height)
        y = self.y
        self.y += height
        return y

    def skip(self, height: float) -> None:
        self.y += height


class ConsultationReport:
    SECTION_ORDER = ("summary", "personal", "analysis", "recommendation", "images", "dates", "disclaimer")

    def __init__(self, content: ReportContent, image_slots: Sequence[ImageSlot] = (),
                 logo: Optional[MaterializedImage] = None, invariant: bool = False):
        self.content = content
        self.image_slots = list(image_slots)[:MAX_REPORT_IMAGES]
        self.logo = logo
        self.invariant = invariant

    def render(self) -> bytes:
        buffer = BytesIO()
        pdf = NumberedCanvas(buffer, pagesize=A4, invariant=1 if self.invariant else 0,
                             footer_text=cs.FOOTER_TEXT)
        pdf.setTitle(f"{self.content.title} - {self.content.client_name}")
        pdf.setAuthor(cs.CLIENT_NAME)
        pdf.setSubject(self.content.subtitle)

        paint_background(pdf)
        self._draw_header(pdf)

        cursor = FlowingCursor(pdf, on_new_page=paint_background)
        cursor.y = HEADER_BOTTOM
        for section in self.content.ordered(self.SECTION_ORDER):
            self._draw_section(cursor, section)

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    # ---------- header ----------
    def _draw_header(self, pdf: canvas.Canvas) -> None:
        if self.logo is not None:
            reader = _image_reader(self.logo)
            if reader is not None:
                pdf.drawImage(reader, _x(MARGIN), _y(55), width=40 * mm, height=40 * mm, preserveAspectRatio=True)

        pdf.setFont(BOLD_FONT, 26)
        pdf.setFillColor(CORAL)
        pdf.drawString(_x(MARGIN + 45), _y(35), self.content.title)
        pdf.setFont(BOLD_FONT, 16)
        pdf.setFillColor(WHITE)
        pdf.drawString(_x(MARGIN + 45), _y(45), self.content.subtitle)

        pdf.setStrokeColor(CORAL)
        pdf.setLineWidth(0.5 * mm)
        pdf.line(_x(MARGIN), _y(55), _x(PAGE_WIDTH - MARGIN), _y(55))

    # ---------- sections ----------
    def _draw_section(self, cursor: FlowingCursor, section) -> None:
        if isinstance(section, FieldsSection):
            self._heading(cursor, section.title)
            for field in section.fields:
                self._paragraph(cursor, f"{field.label}: {field.value}")
        elif isinstance(section, RecommendationSection):
            self._heading(cursor, section.title)
            self._paragraph(cursor, f"Recommended Style: {section.style_title}", font=BOLD_FONT)
            cursor.skip(LINE_HEIGHT)
            self._paragraph(cursor, "Recommended Treatments:", font=BOLD_FONT)
            self._paragraph(cursor, section.treatments)
            cursor.skip(LINE_HEIGHT)
            self._paragraph(cursor, "Hair Care Routine:", font=BOLD_FONT)
            self._paragraph(cursor, section.care)
            cursor.skip(LINE_HEIGHT)
            self._paragraph(cursor, "Maintenance Schedule:", font=BOLD_FONT)
            for item in section.schedule:
                self._paragraph(cursor, f"• {item}", indent=4)
        elif isinstance(section, ImageSection):
            self._image_grid(cursor, section)
        elif isinstance(section, DatesSection):
            self._heading(cursor, section.title)
            self._paragraph(cursor, section.intro)
            cursor.skip(LINE_HEIGHT)
            for entry in section.entries:
                self._paragraph(cursor, entry)
            cursor.skip(LINE_HEIGHT)
            self._paragraph(cursor, section.total_line, font=BOLD_FONT)
            self._paragraph(cursor, section.reminder, color=MUTED, size=9)
        elif isinstance(section, NoteSection):
            self._heading(cursor, section.title)
            muted = section.key == "disclaimer"
            self._paragraph(cursor, section.text, color=MUTED if muted else WHITE, size=9 if muted else BODY_SIZE)
        cursor.skip(SECTION_GAP)

    def _heading(self, cursor: FlowingCursor, title: str, keep_with: float = LINE_HEIGHT) -> None:
        # never leave a heading alone at the bottom of a page
        cursor.ensure_space(HEADING_HEIGHT + keep_with)
        top = cursor.append_block(HEADING_HEIGHT)
        pdf = cursor.pdf
        baseline = top + 7
        pdf.setFont(BOLD_FONT, HEADING_SIZE)
        pdf.setFillColor(CORAL)
        pdf.drawString(_x(MARGIN), _y(baseline), title)
        pdf.setStrokeColor(CORAL)
        pdf.setLineWidth(0.5 * mm)
        width = pdf.stringWidth(title, BOLD_FONT, HEADING_SIZE)
        pdf.line(_x(MARGIN), _y(baseline + 2), _x(MARGIN) + width, _y(baseline + 2))

    def _paragraph(self, cursor: FlowingCursor, text: str, font: str = BODY_FONT, size: float = BODY_SIZE,
                   color: Color = WHITE, indent: float = 0) -> None:
        lines = simpleSplit(text, font, size, (CONTENT_WIDTH - indent) * mm)
        for line in lines:
            top = cursor.append_block(LINE_HEIGHT)
            pdf = cursor.pdf
            pdf.setFont(font, size)
            pdf.setFillColor(color)
            pdf.drawString(_x(MARGIN + indent), _y(top + 4.5), line)
        cursor.skip(ITEM_GAP)

    def _image_grid(self, cursor: FlowingCursor, section: ImageSection) -> None:
        slots = self.image_slots or [ImageSlot(p, None) for p in section.paths[:MAX_REPORT_IMAGES]]
        if not slots:
            self._heading(cursor, section.title)
            self._paragraph(cursor, section.empty_text, color=MUTED)
            return

        self._heading(cursor, section.title, keep_with=ROW_HEIGHT)
        pdf = cursor.pdf
        for row_start in range(0, len(slots), 2):
            top = cursor.append_block(ROW_HEIGHT)
            for col, slot in enumerate(slots[row_start:row_start + 2]):
                x = MARGIN + col * (CELL_WIDTH + IMAGE_GAP)
                if not self._draw_image(pdf, slot, x, top):
                    self._draw_placeholder(pdf, x, top)
                pdf.setFont(BOLD_FONT, 10)
                pdf.setFillColor(WHITE)
                pdf.drawCentredString(_x(x + CELL_WIDTH / 2), _y(top + CELL_HEIGHT + 10),
                                      f"Style {row_start + col + 1}")

    def _draw_image(self, pdf: canvas.Canvas, slot: ImageSlot, x: float, top: float) -> bool:
        if slot.image is None:
            return False
        reader = _image_reader(slot.image)
        if reader is None:
            return False
        img_w, img_h = reader.getSize()
        ratio = img_w / img_h
        final_w, final_h = CELL_WIDTH, CELL_WIDTH / ratio
        if final_h > CELL_HEIGHT:
            final_h, final_w = CELL_HEIGHT, CELL_HEIGHT * ratio
        x_off = (CELL_WIDTH - final_w) / 2
        y_off = (CELL_HEIGHT - final_h) / 2
        pdf.drawImage(reader, _x(x + x_off), _y(top + y_off + final_h), width=final_w * mm, height=final_h * mm)
        return True

    def _draw_placeholder(self, pdf: canvas.Canvas, x: float, top: float) -> None:
        pdf.setFillColor(PLACEHOLDER_FILL)
        pdf.rect(_x(x), _y(top + CELL_HEIGHT), CELL_WIDTH * mm, CELL_HEIGHT * mm, stroke=0, fill=1)
        pdf.setFont(BODY_FONT, 9)
        pdf.setFillColor(CORAL)
        pdf.drawCentredString(_x(x + CELL_WIDTH / 2), _y(top + CELL_HEIGHT / 2), "Image Preview")


def _image_reader(image: MaterializedImage) -> Optional[ImageReader]:
    """Decode with Pillow; anything it can't open (svg, truncated files) gets a placeholder."""
    try:
        pil = Image.open(BytesIO(image.data))
        pil.load()
        if pil.mode != "RGB":
            pil = pil.convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        log.warning("Could not decode %s for the PDF: %s", image.filename, e)
        return None
    if not pil.width or not pil.height:
        return None
    return ImageReader(pil)


def render_pdf(content: ReportContent, image_slots: Sequence[ImageSlot] = (),
               logo: Optional[MaterializedImage] = None, invariant: bool = False) -> bytes:
    """Render the consultation report. Any failure surfaces as ReportRenderError."""
    try:
        return ConsultationReport(content, image_slots, logo=logo, invariant=invariant).render()
    except Exception as e:
        log.exception("PDF generation failed for %s", content.client_name)
        raise ReportRenderError(RENDER_FAILED_MESSAGE) from e
