import pytest

from hexagono.core.settings import Settings, settings


@pytest.fixture
def stale_quotes(make_quote, age_quote):
    quotes = [make_quote(clientEmail=f"c{i}@example.com") for i in range(2)]
    for q in quotes:
        age_quote(q.id, hours=72)
    make_quote(clientEmail="fresh@example.com")
    return quotes


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer wrong"}, {"Authorization": "Basic cron-secret"}],
)
def test_cron_requires_secret(client, headers):
    r = client.post("/api/cron/reminders", headers=headers)

    assert r.status_code == 401
    assert r.json()["code"] == "UNAUTHORIZED"


def test_cron_sends_reminders(client, cron_headers, stale_quotes, mailer):
    mailer.sent.clear()

    r = client.post("/api/cron/reminders", headers=cron_headers)

    assert r.status_code == 200
    assert r.json() == {"processed": 2, "sent": 2, "failed": 0}
    assert sorted(m.to for m in mailer.sent) == ["c0@example.com", "c1@example.com"]

    # segunda corrida dentro de la ventana: nada que hacer
    assert client.post("/api/cron/reminders", headers=cron_headers).json()["sent"] == 0


def test_manual_trigger_forbidden_outside_development(client):
    r = client.get("/api/cron/reminders")

    assert r.status_code == 403
    assert r.json()["code"] == "FORBIDDEN"


def test_manual_trigger_in_development(client, stale_quotes, monkeypatch):
    monkeypatch.setattr(settings, "APP_ENV", "development")

    r = client.get("/api/cron/reminders")

    assert r.status_code == 200
    assert r.json()["processed"] == 2


def test_manual_trigger_closed_with_default_settings(client, stale_quotes, mailer, monkeypatch):
    for key in ("APP_ENV", "ENVIRONMENT"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(settings, "APP_ENV", Settings(_env_file=None).APP_ENV)
    mailer.sent.clear()

    r = client.get("/api/cron/reminders")

    assert r.status_code == 403
    assert mailer.sent == []
