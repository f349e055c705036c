"""
Document content shared by the PDF and the email.

build_report_content() turns one submission into an ordered list of typed
sections. Each renderer walks the sections it wants, in its own order, and
draws them its own way; the wording lives here only.
"""
from datetime import date, datetime
from typing import Iterable, List, NamedTuple, Optional, Tuple

import client_settings as cs
from recommendations import Recommendation
from schemas import ConsultationForm

NOT_SPECIFIED = "Not specified"
NOT_PROVIDED = "Not provided"


class Field(NamedTuple):
    label: str
    value: str


class FieldsSection(NamedTuple):
    key: str
    title: str
    fields: Tuple[Field, ...]


class RecommendationSection(NamedTuple):
    key: str
    title: str
    style_title: str
    treatments: str
    care: str
    schedule: Tuple[str, ...]


class ImageSection(NamedTuple):
    key: str
    title: str
    paths: Tuple[str, ...]
    empty_text: str = "No images available for this style"


class DatesSection(NamedTuple):
    key: str
    title: str
    intro: str
    entries: Tuple[str, ...]
    total_line: str
    reminder: str


class NoteSection(NamedTuple):
    key: str
    title: str
    text: str


class ReportContent(NamedTuple):
    title: str
    subtitle: str
    client_name: str
    first_name: str
    last_name: str
    generated_at: datetime
    sections: Tuple[NamedTuple, ...]

    def section(self, key: str):
        for s in self.sections:
            if s.key == key:
                return s
        return None

    def ordered(self, keys: Iterable[str]) -> List[NamedTuple]:
        found = (self.section(k) for k in keys)
        return [s for s in found if s is not None]


# -------------------------------------------------
# Dates
# -------------------------------------------------
def normalize_dates(dates: Iterable) -> List[date]:
    """Unique calendar days, ascending. datetimes collapse to their day."""
    days = {d.date() if isinstance(d, datetime) else d for d in dates}
    return sorted(days)


def format_long_date(d: date) -> str:
    # "Monday, March 3, 2025" without platform-specific strftime flags
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def numbered_dates(dates: Iterable) -> List[str]:
    return [f"{i}. {format_long_date(d)}" for i, d in enumerate(normalize_dates(dates), start=1)]


def _clock(moment: datetime) -> str:
    return f"{moment.hour % 12 or 12}:{moment:%M %p}"


def reference_for(generated_at: datetime) -> str:
    return f"{cs.REFERENCE_PREFIX}-{generated_at:%H%M%S}"


def _or(value: str, fallback: str = NOT_SPECIFIED) -> str:
    return value if value else fallback


def _joined(values: List[str]) -> str:
    return ", ".join(values) if values else NOT_SPECIFIED


# -------------------------------------------------
# Builder
# -------------------------------------------------
def build_report_content(
    form: ConsultationForm,
    recommendation: Optional[Recommendation],
    image_paths: Iterable[str],
    dates: Iterable,
    generated_at: Optional[datetime] = None,
) -> ReportContent:
    generated_at = generated_at or datetime.now()
    name = form.full_name
    days = normalize_dates(dates)

    sections = [
        FieldsSection("summary", "Client Summary", (
            Field("Name", name),
            Field("Analysis Date", f"{generated_at:%B} {generated_at.day}, {generated_at.year}"),
            Field("Reference", reference_for(generated_at)),
            Field("Report generated on", f"{format_long_date(generated_at.date())} at {_clock(generated_at)}"),
        )),
        FieldsSection("personal", "Personal Information", (
            Field("Full Name", name),
            Field("Email", form.email),
            Field("Phone", _or(form.phone, NOT_PROVIDED)),
        )),
        FieldsSection("analysis", "Hair Analysis Profile", (
            Field("Selected Hair Color", _or(form.selected_hair_color)),
            Field("Natural Hair Color", _or(form.natural_hair_color)),
            Field("Skin Tone", _or(form.skin_color)),
            Field("Eye Color", _or(form.eye_color)),
            Field("Hair Texture", _or(form.hair_texture)),
            Field("Hair Length", _or(form.hair_length)),
            Field("Personal Style", _or(form.personal_style)),
            Field("Maintenance Preference", _or(form.hair_maintenance)),
        )),
        FieldsSection("preferences", "Preferences & Lifestyle", (
            Field("Special Occasions", _joined(form.special_occasions)),
            Field("Preferred Treatments", _joined(form.preferred_treatments)),
            Field("Work", _or(form.work_type)),
            Field("Industry", _or(form.work_industry)),
        )),
    ]

    if recommendation is not None:
        sections.append(RecommendationSection(
            "recommendation", "Professional Recommendations",
            style_title=recommendation.title,
            treatments=recommendation.description,
            care=recommendation.care_instructions,
            schedule=tuple(recommendation.maintenance_schedule),
        ))
        sections.append(ImageSection("images", "Recommended Style Visuals", tuple(image_paths)))
    else:
        sections.append(NoteSection(
            "recommendation", "Professional Recommendations",
            "We don't have a ready-made recommendation for this combination yet. "
            "Your stylist will go through the options with you at your consultation.",
        ))

    if days:
        sections.append(DatesSection(
            "dates", "Scheduled Perfect Hair Days",
            intro="Your scheduled appointment dates:",
            entries=tuple(numbered_dates(days)),
            total_line=f"Total appointments scheduled: {len(days)}",
            reminder=cs.REMINDER_TEXT,
        ))

    sections.append(NoteSection("disclaimer", "Disclaimer", cs.DISCLAIMER_TEXT))

    return ReportContent(
        title=cs.REPORT_TITLE,
        subtitle=cs.REPORT_SUBTITLE,
        client_name=name,
        first_name=form.first_name,
        last_name=form.last_name,
        generated_at=generated_at,
        sections=tuple(sections),
    )
