"""HTTP-level tests for the /api/users routes."""

from datetime import datetime, timezone

import pytest
from jose import JWTError, jwt

from app.core.exceptions import InfrastructureError
from app.interfaces.api.deps import get_user_repository
from app.main import app

REGISTER_URL = "/api/users/register"
LOGIN_URL = "/api/users/login"
ME_URL = "/api/users/me"


def reset_url(user_id):
    return f"/api/users/password_reset/{user_id}"


def decode(token, key="test-secret"):
    return jwt.decode(token, key, algorithms=["HS256"])


class TestRegister:
    def test_register_returns_token_and_user(self, client, registration):
        response = client.post(REGISTER_URL, json=registration)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "you're signed up!"
        assert body["user"]["email"] == "ada@example.com"
        assert body["user"]["firstName"] == "Ada"
        assert "password" not in body["user"]
        assert "adminToken" not in body

        claims = decode(body["token"])
        assert claims["id"] == body["user"]["id"]
        assert claims["email"] == "ada@example.com"

    def test_register_token_expires_in_a_week(self, register):
        body = register()
        claims = decode(body["token"])

        expires = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        remaining = expires - datetime.now(timezone.utc)
        assert 6.9 < remaining.total_seconds() / 86400 <= 7

    def test_register_stores_addresses(self, client, registration):
        registration["shippingAddress"] = {
            "street": "1 Main St", "city": "London", "state": "LDN", "zip": "N1",
        }
        registration["billingAddress"] = {
            "street": "2 Side St", "city": "London", "state": "LDN", "zip": "N2",
        }

        body = client.post(REGISTER_URL, json=registration).json()

        assert body["user"]["shippingAddress"]["street"] == "1 Main St"
        assert body["user"]["billingAddress"]["zip"] == "N2"

    def test_empty_address_leaves_slot_open(self, client, registration, auth_headers):
        registration["shippingAddress"] = {}

        body = client.post(REGISTER_URL, json=registration).json()
        assert body["user"]["shippingAddress"] is None

        response = client.patch(
            ME_URL,
            json={"shippingAddress": {"street": "1 Main St", "city": "London"}},
            headers=auth_headers(body["token"]),
        )

        assert response.status_code == 200
        assert response.json()["shippingAddress"]["street"] == "1 Main St"

    def test_empty_address_on_update_is_not_an_update(self, client, register, auth_headers):
        body = register()

        response = client.patch(
            ME_URL, json={"shippingAddress": {}}, headers=auth_headers(body["token"])
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UserUpdateError"

    def test_duplicate_email_is_rejected(self, client, register, registration):
        register()

        response = client.post(REGISTER_URL, json=registration)

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "EmailInUseError"
        assert "ada@example.com" in error["message"]

    @pytest.mark.parametrize("password", ["", "short", "7chars!"])
    def test_short_password_is_rejected(self, client, registration, password):
        registration["password"] = password

        response = client.post(REGISTER_URL, json=registration)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PasswordTooShortError"

    def test_short_password_does_not_create_the_account(self, client, registration, users):
        registration["password"] = "short"
        client.post(REGISTER_URL, json=registration)

        assert users.get_by_email("ada@example.com") is None

    def test_short_password_reported_even_when_email_taken(self, client, register, registration):
        register()
        registration["password"] = "short"

        response = client.post(REGISTER_URL, json=registration)

        assert response.json()["error"]["code"] == "PasswordTooShortError"

    def test_example_register_twice(self, client, registration):
        registration.update(email="a@x.com", password="longenough")

        first = client.post(REGISTER_URL, json=registration)
        second = client.post(REGISTER_URL, json=registration)

        assert first.status_code == 200
        assert first.json()["token"]
        assert second.status_code == 403
        assert second.json()["error"]["code"] == "EmailInUseError"


class TestLogin:
    def test_login_after_register(self, client, register, registration):
        registered = register()

        response = client.post(
            LOGIN_URL,
            json={"email": registration["email"], "password": registration["password"]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "you're logged in!"
        assert body["user"]["id"] == registered["user"]["id"]
        assert "adminToken" not in body
        claims = decode(body["token"])
        assert claims["id"] == registered["user"]["id"]
        assert claims["email"] == registration["email"]

    def test_wrong_password(self, client, register, registration):
        register()

        response = client.post(
            LOGIN_URL, json={"email": registration["email"], "password": "not-the-password"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "IncorrectCredentialsError"
        assert "token" not in body

    def test_unknown_email(self, client):
        response = client.post(
            LOGIN_URL, json={"email": "nobody@example.com", "password": "whatever123"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "IncorrectCredentialsError"

    def test_inactive_account_gets_no_token(self, client, register, registration, users):
        user_id = register()["user"]["id"]
        users.mark_inactive(user_id)

        response = client.post(
            LOGIN_URL,
            json={"email": registration["email"], "password": registration["password"]},
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Your account has been deactivated",
            "userId": user_id,
            "status": "inactive",
        }

    def test_pending_reset_gets_no_token(self, client, register, registration, users):
        user_id = register()["user"]["id"]
        users.mark_password_reset(user_id)

        response = client.post(
            LOGIN_URL,
            json={"email": registration["email"], "password": registration["password"]},
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Please reset your password",
            "userId": user_id,
            "needsReset": True,
        }

    def test_pending_reset_wins_over_inactive(self, client, register, registration, users):
        user_id = register()["user"]["id"]
        users.mark_inactive(user_id)
        users.mark_password_reset(user_id)

        body = client.post(
            LOGIN_URL,
            json={"email": registration["email"], "password": registration["password"]},
        ).json()

        assert body["needsReset"] is True
        assert "token" not in body

    def test_inactive_with_wrong_password_is_still_incorrect(self, client, register, registration, users):
        users.mark_inactive(register()["user"]["id"])

        response = client.post(
            LOGIN_URL, json={"email": registration["email"], "password": "wrong-password"}
        )

        assert response.status_code == 400

    def test_admin_receives_elevated_token(self, client, register, registration, users):
        user_id = register()["user"]["id"]
        users.grant_admin(user_id)

        body = client.post(
            LOGIN_URL,
            json={"email": registration["email"], "password": registration["password"]},
        ).json()

        assert decode(body["adminToken"], key="test-admin-secret")["id"] == user_id
        with pytest.raises(JWTError):
            decode(body["adminToken"], key="test-secret")


class TestPasswordReset:
    def _consume(self, client, user_id, password):
        return client.request("DELETE", reset_url(user_id), json={"password": password})

    def test_same_password_is_rejected(self, client, register, registration, users):
        user_id = register()["user"]["id"]
        users.mark_password_reset(user_id)

        response = self._consume(client, user_id, registration["password"])

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "SamePasswordError"

        users.db.expire_all()
        assert users.get_account_state(user_id).status.value == "pending_reset"
        assert users.get_by_credentials(registration["email"], registration["password"]) is not None

    def test_new_password_replaces_old(self, client, register, registration, users):
        user_id = register()["user"]["id"]
        users.mark_password_reset(user_id)

        response = self._consume(client, user_id, "a-brand-new-password")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "you're logged in!"
        assert decode(body["token"])["id"] == user_id
        assert users.get_account_state(user_id).status.value == "normal"

        new_login = client.post(
            LOGIN_URL, json={"email": registration["email"], "password": "a-brand-new-password"}
        )
        old_login = client.post(
            LOGIN_URL, json={"email": registration["email"], "password": registration["password"]}
        )
        assert new_login.status_code == 200
        assert "token" in new_login.json()
        assert old_login.status_code == 400

    def test_admin_gets_elevated_token_after_reset(self, client, register, users):
        user_id = register()["user"]["id"]
        users.grant_admin(user_id)
        users.mark_password_reset(user_id)

        body = self._consume(client, user_id, "a-brand-new-password").json()

        assert decode(body["adminToken"], key="test-admin-secret")["id"] == user_id

    def test_no_pending_reset(self, client, register):
        user_id = register()["user"]["id"]

        response = self._consume(client, user_id, "a-brand-new-password")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "ResetNotPendingError"

    def test_unknown_user(self, client):
        response = self._consume(client, 999, "a-brand-new-password")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "UserNotFoundError"

    def test_short_new_password(self, client, register, users):
        user_id = register()["user"]["id"]
        users.mark_password_reset(user_id)

        response = self._consume(client, user_id, "short")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PasswordTooShortError"


class TestProfile:
    def test_get_me(self, client, register, auth_headers):
        body = register()

        response = client.get(ME_URL, headers=auth_headers(body["token"]))

        assert response.status_code == 200
        assert response.json()["id"] == body["user"]["id"]
        assert response.json()["email"] == "ada@example.com"

    def test_get_me_requires_token(self, client):
        response = client.get(ME_URL)

        assert response.status_code in (401, 403)

    def test_get_me_rejects_bad_token(self, client, auth_headers):
        response = client.get(ME_URL, headers=auth_headers("not-a-token"))

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UnauthorizedException"

    def test_get_me_rejects_admin_key_token(self, client, register, users, auth_headers):
        body = register()
        forged = jwt.encode(
            {"id": body["user"]["id"], "email": "ada@example.com"},
            "test-admin-secret",
            algorithm="HS256",
        )

        assert client.get(ME_URL, headers=auth_headers(forged)).status_code == 401

    def test_update_fields(self, client, register, auth_headers):
        body = register()

        response = client.patch(
            ME_URL,
            json={"firstName": "Augusta", "phone": "555-0199"},
            headers=auth_headers(body["token"]),
        )

        assert response.status_code == 200
        assert response.json()["firstName"] == "Augusta"
        assert response.json()["phone"] == "555-0199"
        assert response.json()["lastName"] == "Lovelace"

    def test_update_to_own_email_is_allowed(self, client, register, auth_headers):
        body = register()

        response = client.patch(
            ME_URL,
            json={"email": "ada@example.com", "lastName": "King"},
            headers=auth_headers(body["token"]),
        )

        assert response.status_code == 200
        assert response.json()["lastName"] == "King"

    def test_update_to_taken_email(self, client, register, auth_headers, users):
        register(email="taken@example.com")
        body = register()

        response = client.patch(
            ME_URL,
            json={"email": "taken@example.com", "firstName": "Changed"},
            headers=auth_headers(body["token"]),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "EmailInUseError"
        unchanged = users.get_by_id(body["user"]["id"])
        assert unchanged.email == "ada@example.com"
        assert unchanged.first_name == "Ada"

    def test_shipping_address_is_set_once(self, client, register, auth_headers):
        body = register()
        headers = auth_headers(body["token"])

        first = client.patch(
            ME_URL, json={"shippingAddress": {"street": "1 Main St", "city": "London"}}, headers=headers
        )
        second = client.patch(
            ME_URL, json={"shippingAddress": {"street": "9 Other Rd", "city": "Paris"}}, headers=headers
        )

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["shippingAddress"]["street"] == "1 Main St"
        assert second.json()["shippingAddress"]["city"] == "London"

    def test_billing_address_with_fields(self, client, register, auth_headers):
        body = register()

        response = client.patch(
            ME_URL,
            json={"billingAddress": {"street": "2 Side St", "zip": "N2"}, "phone": "555-0142"},
            headers=auth_headers(body["token"]),
        )

        assert response.status_code == 200
        assert response.json()["billingAddress"]["zip"] == "N2"
        assert response.json()["phone"] == "555-0142"

    def test_password_change_allows_new_login(self, client, register, registration, auth_headers):
        body = register()

        patched = client.patch(
            ME_URL, json={"password": "another-long-one"}, headers=auth_headers(body["token"])
        )
        assert patched.status_code == 200

        new_login = client.post(
            LOGIN_URL, json={"email": registration["email"], "password": "another-long-one"}
        )
        old_login = client.post(
            LOGIN_URL, json={"email": registration["email"], "password": registration["password"]}
        )
        assert new_login.status_code == 200
        assert old_login.status_code == 400
        assert old_login.json()["error"]["code"] == "IncorrectCredentialsError"

    def test_empty_update(self, client, register, auth_headers):
        body = register()

        response = client.patch(ME_URL, json={}, headers=auth_headers(body["token"]))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UserUpdateError"


class TestStoreFailures:
    def test_store_outage_surfaces_as_503(self, client, registration):
        class BrokenRepository:
            def get_by_email(self, email):
                raise InfrastructureError(details={"operation": "get_by_email:users"})

        app.dependency_overrides[get_user_repository] = lambda: BrokenRepository()

        response = client.post(REGISTER_URL, json=registration)

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "InfrastructureError"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
