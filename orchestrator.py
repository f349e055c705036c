"""
Submission handling shared by the wizard and the HTTP API.

PDF generation and email delivery are separate best-effort operations: one
failing never stops or undoes the other. Both read from the same snapshot
(one resolver call, one set of downloaded images) so they always agree.
"""
import logging
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional, Sequence

import client_settings as cs
from dispatcher import MailError, MailSendFailed, MailSettings, SmtpTransport, send_secure_email
from email_report import render_dates_email, render_email
from images import ImageSlot, materialize, materialize_all
from logger import log_submission
from pdf_report import ReportRenderError, render_pdf, report_filename
from recommendations import MAX_REPORT_IMAGES, Recommendation, resolve
from report_content import ReportContent, build_report_content
from schemas import ConsultationForm, ErrorResponse, SubmissionRequest, SubmissionResponse

log = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Please enter an email address and select at least one date."
SUCCESS_MESSAGE = "Form submitted successfully"
SEND_FAILED_MESSAGE = "Failed to send email"


class SubmissionResult(NamedTuple):
    status_code: int
    body: dict

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class ReportFile(NamedTuple):
    filename: str
    data: bytes


class Snapshot(NamedTuple):
    recommendation: Optional[Recommendation]
    image_slots: List[ImageSlot]
    content: ReportContent


class SubmissionOutcome(NamedTuple):
    report: Optional[ReportFile]
    report_error: Optional[str]
    email: SubmissionResult


def _error(status_code: int, message: str) -> SubmissionResult:
    return SubmissionResult(status_code, ErrorResponse(error=message).model_dump())


def validate_submission(email, dates) -> Optional[str]:
    """Returns the message to show the client, or None when the submission can go ahead."""
    if not isinstance(email, str) or not email.strip():
        return VALIDATION_MESSAGE
    if not isinstance(dates, (list, tuple)) or len(dates) == 0:
        return VALIDATION_MESSAGE
    return None


def prepare(form: ConsultationForm, dates: Sequence, base_url: Optional[str] = None,
            materializer: Callable[..., List[ImageSlot]] = materialize_all,
            generated_at: Optional[datetime] = None) -> Snapshot:
    recommendation = resolve(form.profile())
    paths = list(recommendation.image_paths[:MAX_REPORT_IMAGES]) if recommendation else []
    slots = materializer(paths, base_url if base_url is not None else cs.PUBLIC_BASE_URL)
    content = build_report_content(form, recommendation, paths, dates, generated_at)
    return Snapshot(recommendation, slots, content)


def generate_report(snapshot: Snapshot, base_url: Optional[str] = None,
                    logo_loader: Callable = materialize, invariant: bool = False) -> ReportFile:
    """Raises ReportRenderError; nothing partial is returned."""
    content = snapshot.content
    logo = logo_loader(cs.LOGO_PATH, base_url if base_url is not None else cs.PUBLIC_BASE_URL)
    data = render_pdf(content, snapshot.image_slots, logo=logo, invariant=invariant)
    return ReportFile(report_filename(content.first_name, content.last_name, content.generated_at.date()), data)


def deliver_emails(snapshot: Snapshot, recipient: str, send_additional: bool,
                   settings: MailSettings, transport_factory: Callable = SmtpTransport) -> SubmissionResult:
    content = snapshot.content
    composed = render_email(content, snapshot.image_slots)
    primary_error = None
    try:
        with transport_factory(settings) as transport:
            try:
                send_secure_email(composed, transport, recipient, bcc=settings.business_email or None)
            except MailSendFailed as e:
                primary_error = e
            if send_additional:
                try:
                    send_secure_email(render_dates_email(content), transport, recipient)
                except MailSendFailed as e:
                    log.warning("Dates confirmation to %s failed: %s", recipient, e.detail)
    except MailError as e:
        primary_error = e

    if primary_error is not None:
        log.error("Email for %s failed (%s): %s", content.client_name, type(primary_error).__name__,
                  primary_error.detail)
        log_submission(content.client_name, "email", f"Failed: {type(primary_error).__name__}")
        return _error(primary_error.status_code, primary_error.public_message)

    log_submission(content.client_name, "email", "Success")
    body = SubmissionResponse(message=SUCCESS_MESSAGE, images_processed=len(composed.attachments))
    return SubmissionResult(200, body.model_dump(by_alias=True))


def send_submission(request: SubmissionRequest, base_url: Optional[str] = None,
                    settings: Optional[MailSettings] = None, transport_factory: Callable = SmtpTransport,
                    materializer: Callable[..., List[ImageSlot]] = materialize_all) -> SubmissionResult:
    """The /api/send-email handler body."""
    message = validate_submission(request.email, request.dates)
    if message:
        return _error(400, message)
    try:
        snapshot = prepare(request.form_data, request.dates, base_url, materializer)
        return deliver_emails(snapshot, request.email, request.send_additional_email,
                              settings or MailSettings.from_env(), transport_factory)
    except Exception:
        log.exception("Unexpected error while sending the consultation email")
        return _error(500, SEND_FAILED_MESSAGE)


def run_submission(form: ConsultationForm, dates: Sequence, send_additional: bool = True,
                   base_url: Optional[str] = None, settings: Optional[MailSettings] = None,
                   transport_factory: Callable = SmtpTransport,
                   materializer: Callable[..., List[ImageSlot]] = materialize_all,
                   logo_loader: Callable = materialize,
                   generated_at: Optional[datetime] = None) -> SubmissionOutcome:
    """
    The wizard's "Download & Submit" action: build the PDF and send the email.
    Each half reports its own result.
    """
    message = validate_submission(form.email, list(dates or []))
    if message:
        return SubmissionOutcome(None, None, _error(400, message))

    snapshot = prepare(form, dates, base_url, materializer, generated_at)

    report, report_error = None, None
    try:
        report = generate_report(snapshot, base_url, logo_loader)
    except ReportRenderError as e:
        report_error = str(e)
    log_submission(snapshot.content.client_name, "pdf", "Failed" if report_error else "Success")

    try:
        email_result = deliver_emails(snapshot, form.email, send_additional,
                                      settings or MailSettings.from_env(), transport_factory)
    except Exception:
        log.exception("Unexpected error while sending the consultation email")
        email_result = _error(500, SEND_FAILED_MESSAGE)

    return SubmissionOutcome(report, report_error, email_result)
