import base64
import os
import tempfile
import threading
from datetime import timedelta

# --- env antes de importar hexagono: settings y engine se crean al importar ---
_TMP_DIR = tempfile.mkdtemp(prefix="hexagono-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["APP_ENV"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "s3cret"
os.environ["CRON_SECRET"] = "cron-secret"
os.environ["RESEND_API_KEY"] = ""
os.environ["PUBLIC_BASE_URL"] = "https://hexagono.test"

import pytest
from fastapi.testclient import TestClient

from hexagono import models  # noqa: F401  (registra las tablas)
from hexagono.core.errors import NotificationFailure
from hexagono.db import Base, SessionLocal, engine
from hexagono.models.quote import Quote, utcnow
from hexagono.schemas.quote import QuoteCreateRequest
from hexagono.services.lifecycle import QuoteLifecycleManager, run_inline
from hexagono.services.notifications import NotificationService


class FakeMailer:
    """Registra los mensajes; `fail_for` = destinatarios que fallan."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()
        self._lock = threading.Lock()

    def send(self, message):
        with self._lock:
            if message.to in self.fail_for:
                raise NotificationFailure(context={"reason": "fake_failure"})
            self.sent.append(message)
            return f"fake-{len(self.sent)}"

    def subjects(self):
        return [m.subject for m in self.sent]

    def to(self, address):
        return [m for m in self.sent if m.to == address]


class RecordingDispatch:
    """Guarda las llamadas sin ejecutarlas."""

    def __init__(self):
        self.calls = []

    def __call__(self, fn, *args, **kwargs):
        self.calls.append((fn.__name__, args, kwargs))


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def notifications(mailer):
    return NotificationService(SessionLocal, mailer, base_url="https://hexagono.test")


@pytest.fixture
def lifecycle(db, notifications):
    return QuoteLifecycleManager(db, notifications=notifications, dispatch=run_inline)


@pytest.fixture
def recording_dispatch():
    return RecordingDispatch()


@pytest.fixture
def quote_payload():
    def _make(**overrides):
        data = {
            "clientName": "María González",
            "clientEmail": "maria@example.com",
            "clientPhone": "+54 11 5555-1234",
            "serviceType": "CORPORATE_WEB",
            "features": ["seo-optimization", "cms-integration"],
            "timeline": "1-2 meses",
            "description": "Sitio institucional con blog",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def make_quote(lifecycle, quote_payload):
    def _make(**overrides):
        return lifecycle.create_quote(QuoteCreateRequest(**quote_payload(**overrides)))

    return _make


@pytest.fixture
def age_quote(db):
    """Mueve created_at hacia atrás `hours` horas."""

    def _age(quote_id, hours):
        quote = db.get(Quote, quote_id)
        quote.created_at = utcnow() - timedelta(hours=hours)
        db.commit()
        return quote

    return _age


@pytest.fixture
def client(notifications):
    from hexagono.dependencies import get_notification_service
    from hexagono.main import app

    app.dependency_overrides[get_notification_service] = lambda: notifications
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = base64.b64encode(b"admin:s3cret").decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def cron_headers():
    return {"Authorization": "Bearer cron-secret"}
