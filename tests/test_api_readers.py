from fakes import VALID_OTP


def test_send_otp_validates_and_throttles(client, auth):
    resp = client.post("/api/readers/send-otp", json={"email": "not-an-email"})
    assert resp.status_code == 400

    resp = client.post("/api/readers/send-otp", json={"email": " Ann@Example.com "})
    assert resp.status_code == 200
    assert resp.json()["data"] == {"email": "ann@example.com"}
    assert auth.otp_sent == ["ann@example.com"]

    resp = client.post("/api/readers/send-otp", json={"email": "ann@example.com"})
    assert resp.status_code == 429
    assert resp.json()["code"] == 42901
    assert auth.otp_sent == ["ann@example.com"]


def test_verify_otp_registers_new_reader(client, db):
    resp = client.post(
        "/api/readers/verify-otp", json={"email": "new@example.com", "otp": VALID_OTP}
    )
    data = resp.json()["data"]
    assert resp.status_code == 200
    assert data["isNewUser"] is True
    assert data["nextStep"] == "name"
    assert data["token"] == "token-new@example.com"
    assert data["user"]["authProvider"] == "otp"
    assert data["user"]["isRegistered"] is True

    (reader,) = db.table("readers")
    assert reader["email"] == "new@example.com"


def test_verify_otp_with_profile_goes_to_welcome(client):
    resp = client.post(
        "/api/readers/verify-otp",
        json={
            "email": "full@example.com",
            "otp": VALID_OTP,
            "name": "Full",
            "interests": ["Sports", "Sports", "Technology"],
        },
    )
    data = resp.json()["data"]
    assert data["nextStep"] == "welcome"
    assert data["user"]["interests"] == ["Sports", "Technology"]


def test_verify_otp_rejects_bad_code_and_interest(client):
    resp = client.post(
        "/api/readers/verify-otp", json={"email": "x@example.com", "otp": "000000"}
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid or expired verification code"

    resp = client.post(
        "/api/readers/verify-otp",
        json={"email": "x@example.com", "otp": VALID_OTP, "interests": ["Knitting"]},
    )
    assert resp.status_code == 400


def test_subscriber_becomes_registered_on_login(client, make_reader):
    make_reader(email="sub@example.com", is_registered=False, is_subscriber=True, name="")
    data = client.post(
        "/api/readers/verify-otp", json={"email": "sub@example.com", "otp": VALID_OTP}
    ).json()["data"]
    assert data["isNewUser"] is True
    assert data["user"]["isSubscriber"] is True
    assert data["user"]["isRegistered"] is True


def test_suspended_reader_cannot_login(client, make_reader):
    make_reader(email="bad@example.com", status="suspended")
    resp = client.post(
        "/api/readers/verify-otp", json={"email": "bad@example.com", "otp": VALID_OTP}
    )
    assert resp.status_code == 403


def test_google_login_keeps_existing_name(client, auth, make_reader):
    make_reader(email="g@example.com", name="Original")
    auth.google_users["good"] = {
        "id": "auth-g",
        "email": "g@example.com",
        "user_metadata": {"full_name": "From Google"},
    }
    data = client.post("/api/readers/google-login", json={"token": "good"}).json()["data"]
    assert data["user"]["name"] == "Original"
    assert data["isNewUser"] is False

    resp = client.post("/api/readers/google-login", json={"token": "bad"})
    assert resp.status_code == 401


def test_google_login_new_reader_uses_google_name(client, auth):
    auth.google_users["t"] = {
        "id": "auth-n",
        "email": "n@example.com",
        "user_metadata": {"name": "Nia"},
    }
    data = client.post("/api/readers/google-login", json={"token": "t"}).json()["data"]
    assert data["isNewUser"] is True
    assert data["user"]["name"] == "Nia"
    assert data["user"]["authProvider"] == "google"
    assert data["nextStep"] == "interests"


def test_me_requires_reader_record(client, make_reader, make_admin):
    _, admin_headers = make_admin("editor")
    resp = client.get("/api/readers/me", headers=admin_headers)
    assert resp.status_code == 401
    assert resp.json()["message"] == "Reader not found"

    reader, headers = make_reader(name="Ann")
    resp = client.get("/api/readers/me", headers=headers)
    assert resp.json()["data"]["_id"] == reader["id"]


def test_update_me(client, make_reader):
    _, headers = make_reader()
    resp = client.put(
        "/api/readers/me", json={"name": " Bea ", "interests": ["Health"]}, headers=headers
    )
    assert resp.json()["data"]["name"] == "Bea"
    assert resp.json()["data"]["interests"] == ["Health"]

    resp = client.put("/api/readers/me", json={"interests": ["Nope"]}, headers=headers)
    assert resp.status_code == 400


def test_saved_articles(client, make_reader, make_article):
    _, headers = make_reader()
    first = make_article(title="First")
    second = make_article(title="Second")
    draft = make_article(title="Draft", status="draft")

    assert client.post(f"/api/readers/saved-articles/{first['id']}", headers=headers).status_code == 200
    client.post(f"/api/readers/saved-articles/{second['id']}", headers=headers)
    client.post(f"/api/readers/saved-articles/{second['id']}", headers=headers)
    client.post(f"/api/readers/saved-articles/{draft['id']}", headers=headers)

    resp = client.post("/api/readers/saved-articles/missing", headers=headers)
    assert resp.status_code == 404

    titles = [a["title"] for a in client.get("/api/readers/saved-articles", headers=headers).json()["data"]]
    assert sorted(titles) == ["First", "Second"]

    client.delete(f"/api/readers/saved-articles/{first['id']}", headers=headers)
    titles = [a["title"] for a in client.get("/api/readers/saved-articles", headers=headers).json()["data"]]
    assert titles == ["Second"]


def test_subscribe(client, db, make_reader):
    resp = client.post("/api/readers/subscribe", json={"email": "fan@example.com"})
    assert resp.json()["message"] == "Subscribed successfully"
    resp = client.post("/api/readers/subscribe", json={"email": "fan@example.com"})
    assert resp.json()["message"] == "You are already subscribed"

    make_reader(email="member@example.com")
    client.post("/api/readers/subscribe", json={"email": "member@example.com"})
    subscribers = sorted(r["email"] for r in db.table("readers") if r["is_subscriber"])
    assert subscribers == ["fan@example.com", "member@example.com"]


def test_subscribe_disabled_by_feature_flag(client, db):
    db.seed("site_configs", {"id": "default", "data": {"features": {"enableEmailSubscribe": False}}})
    resp = client.post("/api/readers/subscribe", json={"email": "fan@example.com"})
    assert resp.status_code == 403
