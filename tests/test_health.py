def test_health(client, make_quote):
    make_quote()

    r = client.get("/health")

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["database"] == "ok"
    assert body["environment"] == "test"
    assert body["quotes"]["total"] == 1
    assert body["quotes"]["byStatus"]["PENDING"] == 1


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


def test_request_id_is_generated(client):
    assert client.get("/health").headers["X-Request-ID"]


def test_metrics(client):
    client.post("/api/pricing/calculate", json={"serviceType": "LANDING_PAGE"})

    r = client.get("/metrics")

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert "hexagono_price_estimates_total" in r.text
