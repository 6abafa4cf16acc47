import pytest


def test_create_without_smtp_logs_link(client, identity, store):
    res = client.post("/users", json={"fullName": "A", "email": "a@x.com", "password": "secret1"})
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["logged"] is True
    assert body["phoneNumber"] is None
    assert body["link"].startswith("https://auth.example.com/verify")
    assert "continueUrl=https://app.example.com/signin" in body["link"]

    # provider account and document share the uid
    uid = identity.accounts["a@x.com"].uid
    assert body["uid"] == uid
    assert list(store.documents) == [uid]
    document = store.documents[uid]
    assert document["role"] == "USER"
    assert document["purchases"] == []
    assert document["fullName"] == "A"
    assert document["createdAt"] == document["lastLogin"]


def test_create_with_smtp_sends_welcome_email(smtp_client, mailer):
    res = smtp_client.post("/users", json={"fullName": "B", "email": "b@x.com", "password": "secret1"})
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["logged"] is None and body["link"] is None
    assert body["phoneNumber"] is None

    assert len(mailer.sent) == 1
    email = mailer.sent[0]
    assert email["recipient"] == "b@x.com"
    assert email["sender"] == "no-reply@example.com"
    assert email["subject"] == "Verify your email for Sure Proxies"
    assert "Thanks for creating an account" in email["html"]


def test_create_succeeds_when_email_transport_fails(smtp_client, mailer, store):
    mailer.fail = True
    res = smtp_client.post("/users", json={"fullName": "C", "email": "c@x.com", "password": "secret1"})
    assert res.status_code == 201
    body = res.json()
    assert body["email"] == "c@x.com"
    assert body["logged"] is None
    assert len(store.documents) == 1


def test_create_succeeds_when_link_generation_fails(client, identity, store):
    identity.fail_links = True
    res = client.post("/users", json={"fullName": "D", "email": "d@x.com", "password": "secret1"})
    assert res.status_code == 201
    assert len(store.documents) == 1


def test_create_duplicate_email(client, signup):
    signup(client)
    res = client.post("/users", json={"fullName": "A", "email": "a@x.com", "password": "secret1"})
    assert res.status_code == 400


def test_create_weak_password_is_rejected_by_provider(client, store):
    res = client.post("/users", json={"fullName": "A", "email": "a@x.com", "password": "abc"})
    assert res.status_code == 400
    assert store.documents == {}


@pytest.mark.parametrize("payload", [
    {"email": "a@x.com", "password": "secret1"},
    {"fullName": "A", "email": "not-an-email", "password": "secret1"},
    {"fullName": "A", "email": "a@x.com"},
])
def test_create_malformed_request(client, payload):
    assert client.post("/users", json=payload).status_code == 400


def test_create_store_failure_keeps_provider_account(client, identity, store):
    store.fail_writes = True
    res = client.post("/users", json={"fullName": "A", "email": "a@x.com", "password": "secret1"})
    assert res.status_code == 500
    assert res.json()["detail"] == "Unable to save account information. Please try again."
    # no compensating delete on the provider side
    assert "a@x.com" in identity.accounts


def test_create_detects_missing_document(client, store):
    store.drop_writes = True
    res = client.post("/users", json={"fullName": "A", "email": "a@x.com", "password": "secret1"})
    assert res.status_code == 500
    assert "contact support" in res.json()["detail"]


def test_list_defaults_missing_fields(client, store, signup):
    signup(client)
    store.documents["legacy"] = {"uid": "legacy", "email": "old@x.com", "fullName": "Old"}

    res = client.get("/users")
    assert res.status_code == 200
    users = {u["uid"]: u for u in res.json()}
    assert set(users) == {"uid-1", "legacy"}
    assert users["legacy"]["purchases"] == []
    assert users["legacy"]["role"] == "USER"


def test_get_user(client, signup):
    created = signup(client)
    res = client.get(f"/users/{created['uid']}")
    assert res.status_code == 200
    assert res.json()["email"] == "a@x.com"


def test_get_missing_user(client):
    res = client.get("/users/nobody")
    assert res.status_code == 404
    assert res.json()["detail"] == "Account not found"


def test_update_merges_fields(client, store, signup):
    created = signup(client)
    uid = created["uid"]
    res = client.patch(f"/users/{uid}", json={"phoneNumber": "+15550100", "nickname": "ace"})
    assert res.status_code == 200
    body = res.json()
    assert body["phoneNumber"] == "+15550100"
    assert body["nickname"] == "ace"
    assert body["fullName"] == "A"
    assert store.documents[uid]["phoneNumber"] == "+15550100"
    assert store.documents[uid]["nickname"] == "ace"


def test_update_cannot_change_uid(client, store, signup):
    uid = signup(client)["uid"]
    res = client.patch(f"/users/{uid}", json={"uid": "hijacked", "role": "ADMIN"})
    assert res.status_code == 200
    assert res.json()["uid"] == uid
    assert res.json()["role"] == "ADMIN"
    assert list(store.documents) == [uid]


def test_update_wrong_typed_field_is_rejected(client, store, signup):
    uid = signup(client)["uid"]
    writes = list(store.writes)
    res = client.patch(f"/users/{uid}", json={"createdAt": "not-a-date"})
    assert res.status_code == 400
    assert "createdAt" in res.json()["detail"]
    assert store.writes == writes


def test_update_missing_user_does_not_write(client, store):
    res = client.patch("/users/nobody", json={"fullName": "Ghost"})
    assert res.status_code == 404
    assert store.writes == []


def test_delete_returns_snapshot(client, store, signup):
    uid = signup(client)["uid"]
    res = client.delete(f"/users/{uid}")
    assert res.status_code == 200
    assert res.json()["uid"] == uid
    assert res.json()["email"] == "a@x.com"
    assert store.documents == {}
    assert client.delete(f"/users/{uid}").status_code == 404
