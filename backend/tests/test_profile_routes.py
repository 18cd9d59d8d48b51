from backend.errors import StoreUnavailable
from backend.services import profile_service

BASE = "/api/v1/profile"


def create_profile(client, auth, uid, **body):
    body.setdefault("handle", f"dev{uid}")
    resp = client.post(BASE, json=body, headers=auth(uid))
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_smoke_route(client):
    resp = client.get(f"{BASE}/test")
    assert resp.status_code == 200
    assert resp.json() == {"msg": "Profile works"}


def test_own_profile_requires_token(client):
    assert client.get(BASE).status_code == 401
    assert client.get(BASE, headers={"Authorization": "Bearer nope"}).status_code == 401


def test_own_profile_missing_is_404(client, make_user, auth):
    uid = make_user()
    resp = client.get(BASE, headers=auth(uid))
    assert resp.status_code == 404
    assert resp.json() == {"noprofile": "There is no profile for this user"}


def test_create_then_read_everywhere(client, make_user, auth):
    uid = make_user(name="Grace", avatar="https://a.example.com/g.png")
    doc = create_profile(client, auth, uid, handle="grace", status="Developer", skills="cobol,fortran",
                         linkedin="https://linkedin.com/in/grace")

    assert doc["skills"] == ["cobol", "fortran"]
    assert doc["social"] == {"linkedin": "https://linkedin.com/in/grace"}
    assert doc["user"] == {"id": uid, "name": "Grace", "avatar": "https://a.example.com/g.png"}

    assert client.get(BASE, headers=auth(uid)).json()["handle"] == "grace"
    assert client.get(f"{BASE}/handle/grace").json()["id"] == doc["id"]
    assert client.get(f"{BASE}/user/{uid}").json()["id"] == doc["id"]
    assert [p["handle"] for p in client.get(f"{BASE}/all").json()] == ["grace"]


def test_list_all_is_empty_list(client):
    resp = client.get(f"{BASE}/all")
    assert resp.status_code == 200
    assert resp.json() == []


def test_public_lookups_404(client):
    assert client.get(f"{BASE}/handle/ghost").status_code == 404
    assert client.get(f"{BASE}/user/999").status_code == 404


def test_upsert_validation_error_body(client, make_user, auth):
    uid = make_user()
    resp = client.post(BASE, json={"handle": "x", "website": "nope nope"}, headers=auth(uid))
    assert resp.status_code == 400
    assert set(resp.json()) == {"handle", "website"}


def test_upsert_handle_taken(client, make_user, auth):
    a, b = make_user(), make_user()
    create_profile(client, auth, a, handle="shared")
    resp = client.post(BASE, json={"handle": "shared"}, headers=auth(b))
    assert resp.status_code == 400
    assert resp.json() == {"handle": "That handle already exists"}


def test_sparse_update_over_http(client, make_user, auth):
    uid = make_user()
    create_profile(client, auth, uid, website="https://me.example.com")
    doc = client.post(BASE, json={"company": "Acme"}, headers=auth(uid)).json()
    assert doc["company"] == "Acme"
    assert doc["website"] == "https://me.example.com"


def test_experience_flow(client, make_user, auth):
    uid = make_user()

    early = client.post(f"{BASE}/experience", json={"title": "Dev", "company": "Acme", "from": "2019-01-01"},
                        headers=auth(uid))
    assert early.status_code == 404

    create_profile(client, auth, uid)
    bad = client.post(f"{BASE}/experience", json={"company": "Acme"}, headers=auth(uid))
    assert bad.status_code == 400
    assert bad.json()["title"] == "Job title field is required"

    client.post(f"{BASE}/experience", json={"title": "E1", "company": "Acme", "from": "2019-01-01"},
                headers=auth(uid))
    doc = client.post(f"{BASE}/experience", json={"title": "E2", "company": "Initech", "from": "2021-01-01"},
                      headers=auth(uid)).json()
    assert [e["title"] for e in doc["experience"]] == ["E2", "E1"]
    assert doc["experience"][0]["from"] == "2021-01-01"

    noop = client.delete(f"{BASE}/experience/unknown", headers=auth(uid))
    assert noop.status_code == 200
    assert noop.json()["experience"] == doc["experience"]

    gone = client.delete(f"{BASE}/experience/{doc['experience'][0]['id']}", headers=auth(uid)).json()
    assert [e["title"] for e in gone["experience"]] == ["E1"]


def test_education_flow(client, make_user, auth):
    uid = make_user()
    create_profile(client, auth, uid)
    doc = client.post(
        f"{BASE}/education",
        json={"school": "ETH", "degree": "MSc", "fieldofstudy": "Math", "from": "2015-09-01", "current": True},
        headers=auth(uid),
    ).json()
    entry = doc["education"][0]
    assert entry["school"] == "ETH" and entry["current"] is True

    doc = client.delete(f"{BASE}/education/{entry['id']}", headers=auth(uid)).json()
    assert doc["education"] == []


def test_delete_profile_and_account(client, make_user, auth):
    uid = make_user()
    create_profile(client, auth, uid)

    resp = client.delete(BASE, headers=auth(uid))
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get(f"{BASE}/user/{uid}").status_code == 404
    assert client.delete(BASE, headers=auth(uid)).status_code == 404


def test_store_outage_is_503_after_retries(client, monkeypatch):
    calls = {"n": 0}

    def down(db):
        calls["n"] += 1
        raise StoreUnavailable()

    monkeypatch.setattr(profile_service, "list_profiles", down)
    resp = client.get(f"{BASE}/all")
    assert resp.status_code == 503
    assert resp.json() == {"store": "Profile store is unavailable"}
    assert calls["n"] == 3
