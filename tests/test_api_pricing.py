def test_calculate_price(client):
    r = client.post(
        "/api/pricing/calculate",
        json={"serviceType": "ECOMMERCE", "features": ["payment-gateway", "seo-optimization"]},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["basePrice"] == 370000
    assert body["totalEstimate"] == 370000 + 100000 + 50000
    assert body["currency"] == "ARS"
    assert [f["name"] for f in body["additionalFeatures"]] == ["payment-gateway", "seo-optimization"]
    assert body["disclaimer"].startswith("Este es un precio estimado")


def test_calculate_price_unknown_service(client):
    r = client.post("/api/pricing/calculate", json={"serviceType": "WEBSITE", "features": []})

    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "PRICING_ERROR"
    assert body["field"] == "serviceType"
    assert "WEBSITE" in body["error"]


def test_calculate_price_error_in_english(client):
    r = client.post(
        "/api/pricing/calculate",
        json={"serviceType": "WEBSITE"},
        headers={"Accept-Language": "en-US,en;q=0.9"},
    )
    assert r.json()["error"] == "Unknown service type: WEBSITE"


def test_calculate_price_missing_service(client):
    r = client.post("/api/pricing/calculate", json={"features": []})

    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"][0]["field"] == "serviceType"


def test_list_features(client):
    r = client.get("/api/pricing/features/social_media")

    assert r.status_code == 200
    body = r.json()
    assert body["serviceType"] == "SOCIAL_MEDIA"
    assert body["basePrice"] == 180000
    ids = [f["id"] for f in body["features"]]
    assert "seo-optimization" not in ids
    assert all(f["cost"] > 0 and f["name"] for f in body["features"])


def test_list_features_unknown_service(client):
    assert client.get("/api/pricing/features/nope").json()["code"] == "PRICING_ERROR"
