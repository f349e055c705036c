import os
from datetime import date, datetime
from io import BytesIO

import pytest
from PIL import Image

from images import ImageSlot, MaterializedImage
from schemas import ConsultationForm

FIXED_NOW = datetime(2025, 3, 3, 14, 5, 9)


def png_bytes(size=(60, 90), color=(200, 120, 80)):
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture(autouse=True)
def submission_log(tmp_path, monkeypatch):
    path = tmp_path / "submissions.csv"
    monkeypatch.setenv("SUBMISSION_LOG", str(path))
    return path


@pytest.fixture
def form():
    return ConsultationForm(
        first_name="Jane",
        last_name="Doe",
        email="jane@example.com",
        phone="5551234",
        selected_hair_color="Blonde",
        hair_length="Medium",
        personal_style="Trendy",
        natural_hair_color="Brown",
        skin_color="Fair",
        eye_color="Green",
        hair_texture="Fine",
        hair_maintenance="3 months",
        special_occasions=["Work", "Holiday"],
        preferred_treatments=["Balayage"],
        work_type="Corporate",
        work_industry="Finance",
    )


@pytest.fixture
def dates():
    return [date(2025, 12, 24), date(2025, 6, 1), date(2025, 9, 15)]


@pytest.fixture
def png():
    return png_bytes()


@pytest.fixture
def static_root(tmp_path, png):
    """A public/ folder holding the first blonde Medium-Trendy photo."""
    root = tmp_path / "public"
    folder = root / "blonde" / "medium_hair" / "trendy"
    folder.mkdir(parents=True)
    (folder / "mbt1.jpg").write_bytes(png)
    return str(root)


@pytest.fixture
def fake_materializer(png):
    """Every path loads except ones containing 'missing'."""
    calls = []

    def materializer(paths, base_url="", static_root=None):
        calls.append(list(paths))
        return [
            ImageSlot(p, None if "missing" in p else MaterializedImage(png, "image/png", os.path.basename(p)))
            for p in paths
        ]

    materializer.calls = calls
    return materializer


class FakeSMTP:
    """Records what an SMTP_SSL session would have done."""

    instances = []
    noop_code = 250
    fail_login = False
    fail_send_subjects = ()

    def __init__(self, host, port, context=None, timeout=None):
        self.host = host
        self.port = port
        self.sent = []
        self.logged_in = None
        self.quit_called = False
        FakeSMTP.instances.append(self)

    def ehlo(self):
        return 250, b"ok"

    def starttls(self, context=None):
        return 220, b"ready"

    def login(self, user, password):
        import smtplib
        if self.fail_login:
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")
        self.logged_in = (user, password)

    def noop(self):
        return self.noop_code, b"ok"

    def send_message(self, message):
        import smtplib
        if message["Subject"] in self.fail_send_subjects:
            raise smtplib.SMTPDataError(554, b"rejected")
        self.sent.append(message)

    def quit(self):
        self.quit_called = True


@pytest.fixture
def fake_smtp():
    FakeSMTP.instances = []
    FakeSMTP.noop_code = 250
    FakeSMTP.fail_login = False
    FakeSMTP.fail_send_subjects = ()
    yield FakeSMTP
    FakeSMTP.instances = []


@pytest.fixture
def mail_settings():
    from dispatcher import MailSettings
    return MailSettings(user="salon@example.com", password="app-pass", business_email="owner@example.com")


@pytest.fixture
def transport_factory(fake_smtp):
    from dispatcher import SmtpTransport

    def factory(settings):
        return SmtpTransport(settings, smtp_factory=fake_smtp)

    return factory
