"""
Tests for the /api/v1/users/me endpoints.
"""
from models.user import User

from helpers import bearer

ME = "/api/v1/users/me"


def test_me_returns_profile_and_primary_account(client, register_user):
    data = register_user()
    resp = client.get(ME, headers=bearer(data["token"]))
    assert resp.status_code == 200
    body = resp.get_json()["data"]
    assert body["user"]["fullName"] == "Alice Liddell"
    assert body["user"]["dateOfBirth"] == "1990-05-17"
    assert body["account"]["id"] == data["account"]["id"]


def test_me_requires_token(client):
    assert client.get(ME).status_code == 401


def test_me_for_deleted_user(client, storage, register_user):
    data = register_user()
    storage.delete(storage.get(User, data["user"]["id"]))
    storage.save()
    resp = client.get(ME, headers=bearer(data["token"]))
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NOT_FOUND"


def test_partial_update(client, register_user):
    token = register_user()["token"]
    resp = client.patch(ME, headers=bearer(token), json={"fullName": "Alice P. Liddell", "address": "2 Side St"})
    assert resp.status_code == 200
    user = resp.get_json()["data"]["user"]
    assert user["fullName"] == "Alice P. Liddell"
    assert user["address"] == "2 Side St"
    assert user["email"] == "alice@x.com"


def test_update_keeping_own_identity(client, register_user):
    token = register_user()["token"]
    resp = client.patch(ME, headers=bearer(token), json={"userName": "alice", "email": "ALICE@x.com"})
    assert resp.status_code == 200


def test_update_to_taken_username(client, register_user):
    register_user(userName="bob", email="bob@x.com")
    token = register_user()["token"]
    resp = client.patch(ME, headers=bearer(token), json={"userName": "bob"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "DUPLICATE_IDENTITY"


def test_update_rejects_unknown_fields(client, register_user):
    token = register_user()["token"]
    resp = client.patch(ME, headers=bearer(token), json={"passwordHash": "x"})
    assert resp.status_code == 400


class TestChangePassword:
    def test_change_password_ends_every_session(self, client, register_user, login):
        token = register_user()["token"]
        phone, laptop = login(), login()

        resp = client.put(
            f"{ME}/password",
            headers=bearer(token),
            json={"oldPassword": "pw123456789", "newPassword": "new-password-1"},
        )
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Password changed successfully"

        for session in (phone, laptop):
            replay = client.post("/api/v1/auth/refresh-token", json={"refreshToken": session["refreshToken"]})
            assert replay.status_code == 401

        old = client.post("/api/v1/auth/login", json={"usernameOrEmail": "alice", "password": "pw123456789"})
        assert old.status_code == 401
        assert login(password="new-password-1")["accessToken"]

    def test_wrong_old_password(self, client, register_user, login):
        token = register_user()["token"]
        session = login()
        resp = client.put(
            f"{ME}/password",
            headers=bearer(token),
            json={"oldPassword": "not-my-password", "newPassword": "new-password-1"},
        )
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Old password is incorrect"
        # nothing was revoked
        replay = client.post("/api/v1/auth/refresh-token", json={"refreshToken": session["refreshToken"]})
        assert replay.status_code == 200

    def test_weak_new_password(self, client, register_user):
        token = register_user()["token"]
        resp = client.put(
            f"{ME}/password",
            headers=bearer(token),
            json={"oldPassword": "pw123456789", "newPassword": "short"},
        )
        assert resp.status_code == 400
        assert "newPassword" in resp.get_json()["details"]


def test_update_strips_username(client, register_user):
    token = register_user()["token"]
    resp = client.patch(ME, headers=bearer(token), json={"userName": "  alice2  "})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["userName"] == "alice2"


def test_update_rejects_blank_full_name(client, register_user):
    token = register_user()["token"]
    resp = client.patch(ME, headers=bearer(token), json={"fullName": "   "})
    assert resp.status_code == 400
    assert "fullName" in resp.get_json()["details"]
