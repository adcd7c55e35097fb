def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "OK"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_root_lists_endpoints(client):
    body = client.get("/").get_json()
    assert body["endpoints"]["bookings"] == "/api/bookings"


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_cors_allow_list(client):
    resp = client.get("/health", headers={"Origin": "http://localhost:3000"})
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"

    resp = client.get("/health", headers={"Origin": "https://evil.example"})
    assert "Access-Control-Allow-Origin" not in resp.headers


def test_dashboard_counts_and_activity(client, make_booking, corporate_payload):
    make_booking()
    client.post("/api/corporate-bookings", json=corporate_payload)
    client.post("/api/newsletter/subscribe", json={"email": "fan@example.com"})
    client.post("/api/contact", json={
        "name": "Meera",
        "email": "meera@example.com",
        "subject": "Need help now",
        "message": "Please call me back urgently",
        "inquiryType": "support",
    })

    resp = client.get("/api/admin/dashboard")
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["bookings"]["total"] == 1
    assert data["corporateBookings"]["upcoming"] == 1
    assert data["contacts"]["new"] == 1
    assert data["newsletter"]["active"] == 1
    assert {a["type"] for a in data["recentActivity"]} == {"booking", "corporate_booking", "contact"}
    actions = {e["action"] for e in data["recentAuditEvents"]}
    assert {"BOOKING_CREATE", "CORPORATE_BOOKING_CREATE", "NEWSLETTER_SUBSCRIBE", "CONTACT_CREATE"} <= actions


def test_dashboard_alerts_on_urgent_contacts(client):
    contact = client.post("/api/contact", json={
        "name": "Meera",
        "email": "meera@example.com",
        "subject": "Need help now",
        "message": "Please call me back urgently",
    }).get_json()["data"]
    client.put(f"/api/contact/{contact['id']}/status", json={"status": "new", "priority": "urgent"})

    alerts = client.get("/api/admin/dashboard").get_json()["data"]["alerts"]
    assert any(a["level"] == "critical" for a in alerts)
