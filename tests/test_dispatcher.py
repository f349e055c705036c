import pytest

from dispatcher import (
    MailNotConfigured,
    MailSendFailed,
    MailSettings,
    MailVerificationFailed,
    SmtpTransport,
    build_message,
    send_secure_email,
)
from email_report import ComposedEmail, EmailAttachment


@pytest.fixture
def composed(png):
    return ComposedEmail(
        subject="Your Hair Consultation Form Submission",
        html='<p>hello</p><img src="cid:image_0_mbt1jpg">',
        text="hello",
        attachments=[EmailAttachment("image_0_mbt1jpg", "mbt1.jpg", png, "image/png")],
    )


def test_message_structure(composed, png):
    msg = build_message(composed, "salon@example.com", "jane@example.com", bcc="owner@example.com")

    assert msg["To"] == "jane@example.com"
    assert msg["Bcc"] == "owner@example.com"
    assert msg.get_content_type() == "multipart/alternative"
    plain, related = msg.get_payload()
    assert plain.get_content_type() == "text/plain"
    assert related.get_content_type() == "multipart/related"

    html_part, image_part = related.get_payload()
    assert html_part.get_content_type() == "text/html"
    assert image_part.get_content_type() == "image/png"
    assert image_part["Content-ID"] == "<image_0_mbt1jpg>"
    assert image_part.get_content() == png


def test_message_without_images_has_no_related_part(composed):
    msg = build_message(composed._replace(attachments=[]), "salon@example.com", "jane@example.com")
    assert [p.get_content_type() for p in msg.get_payload()] == ["text/plain", "text/html"]
    assert msg["Bcc"] is None


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("EMAIL_USER", "salon@example.com")
    monkeypatch.setenv("EMAIL_PASS", "abcd efgh ijkl mnop")
    monkeypatch.setenv("SMTP_PORT", "587")
    monkeypatch.setenv("BUSINESS_EMAIL", "owner@example.com")
    monkeypatch.delenv("SMTP_HOST", raising=False)

    settings = MailSettings.from_env()
    assert settings.password == "abcdefghijklmnop"
    assert settings.port == 587
    assert settings.host == "smtp.gmail.com"
    assert settings.configured


def test_bad_port_falls_back_to_ssl_default(monkeypatch):
    monkeypatch.setenv("SMTP_PORT", "smtp")
    assert MailSettings.from_env().port == 465


def test_unconfigured_transport_never_connects(fake_smtp):
    with pytest.raises(MailNotConfigured) as err:
        with SmtpTransport(MailSettings("", ""), smtp_factory=fake_smtp):
            pass
    assert err.value.status_code == 500
    assert fake_smtp.instances == []


def test_login_failure_is_verification_error(fake_smtp, mail_settings):
    fake_smtp.fail_login = True
    with pytest.raises(MailVerificationFailed) as err:
        with SmtpTransport(mail_settings, smtp_factory=fake_smtp):
            pass
    assert err.value.status_code == 503
    assert fake_smtp.instances[0].quit_called


def test_bad_noop_is_verification_error(fake_smtp, mail_settings):
    fake_smtp.noop_code = 421
    with pytest.raises(MailVerificationFailed):
        with SmtpTransport(mail_settings, smtp_factory=fake_smtp):
            pass


def test_send_and_close(fake_smtp, mail_settings, composed):
    with SmtpTransport(mail_settings, smtp_factory=fake_smtp) as transport:
        assert send_secure_email(composed, transport, "jane@example.com") == (True, "Sent")

    server = fake_smtp.instances[0]
    assert server.logged_in == ("salon@example.com", "app-pass")
    assert server.sent[0]["From"] == "salon@example.com"
    assert server.quit_called


def test_send_failure(fake_smtp, mail_settings, composed):
    fake_smtp.fail_send_subjects = (composed.subject,)
    with SmtpTransport(mail_settings, smtp_factory=fake_smtp) as transport:
        with pytest.raises(MailSendFailed) as err:
            send_secure_email(composed, transport, "jane@example.com")
    assert err.value.status_code == 502
    assert "rejected" in err.value.detail


def test_starttls_port(fake_smtp, mail_settings):
    with SmtpTransport(mail_settings._replace(port=587), smtp_factory=fake_smtp):
        pass
    assert fake_smtp.instances[0].port == 587
