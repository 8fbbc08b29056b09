"""HTTP tests for /api/auth: signup, login, me, forgot-password and error shapes."""

import time
import unittest

from notekeeper.core.security import verify_access_token
from notekeeper.models import User
from notekeeper.schemas.auth import FORGOT_PASSWORD_MESSAGE, normalize_email
from support import AppHarness


class AuthApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.harness = AppHarness()
        self.client = self.harness.client

    def tearDown(self) -> None:
        self.harness.close()

    def signup(self, username: str = "alice", email: str = "alice@x.com", password: str = "secret1"):
        return self.client.post(
            "/api/auth/signup",
            json={"username": username, "email": email, "password": password},
        )


class TestSignup(AuthApiTestCase):
    def test_signup_returns_token_and_public_user(self) -> None:
        resp = self.signup()
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(
            set(body["user"].keys()), {"id", "username", "email", "role"}
        )
        self.assertEqual(body["user"]["username"], "alice")
        self.assertEqual(body["user"]["email"], "alice@x.com")
        self.assertEqual(body["user"]["role"], "user")
        self.assertEqual(verify_access_token(body["token"], self.harness.settings), body["user"]["id"])
        self.assertNotIn("secret1", resp.text)
        self.assertNotIn("password", resp.text)

    def test_stored_hash_is_not_plaintext(self) -> None:
        self.signup()
        user = self.harness.get_user("alice@x.com")
        self.assertIsNotNone(user)
        self.assertNotEqual(user.password_hash, "secret1")

    def test_email_is_normalized(self) -> None:
        resp = self.signup(email="  Alice@X.COM ")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["user"]["email"], "alice@x.com")

    def test_plus_addressing_and_long_tlds_are_accepted(self) -> None:
        for username, email in [
            ("alice", "alice+notes@x.com"),
            ("bob", "bob@startup.tech"),
            ("carol", "Carol@Example.info"),
        ]:
            resp = self.signup(username=username, email=email)
            self.assertEqual(resp.status_code, 201, resp.text)
            self.assertEqual(resp.json()["user"]["email"], email.lower())

    def test_duplicate_email_is_conflict(self) -> None:
        self.assertEqual(self.signup().status_code, 201)
        resp = self.signup(username="alice2")
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["code"], "conflict")
        self.assertEqual(body["status"], "fail")
        self.assertEqual(body["message"], "User already exists")

    def test_duplicate_username_is_conflict(self) -> None:
        self.signup()
        resp = self.signup(email="other@x.com")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "conflict")

    def test_validation_lists_every_failing_field(self) -> None:
        resp = self.signup(username="al", email="not-an-email", password="123")
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["code"], "validation_error")
        fields = {e["field"] for e in body["errors"]}
        self.assertEqual(fields, {"username", "email", "password"})
        self.assertEqual(self.harness.count_users(), 0)

    def test_missing_fields_are_reported(self) -> None:
        resp = self.client.post("/api/auth/signup", json={"email": "alice@x.com"})
        self.assertEqual(resp.status_code, 400)
        fields = {e["field"] for e in resp.json()["errors"]}
        self.assertEqual(fields, {"username", "password"})


class TestLogin(AuthApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.signup().json()["user"]["id"]

    def login(self, email: str, password: str):
        return self.client.post("/api/auth/login", json={"email": email, "password": password})

    def test_correct_credentials_return_token(self) -> None:
        resp = self.login("alice@x.com", "secret1")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["user"]["id"], self.user_id)
        self.assertEqual(verify_access_token(body["token"], self.harness.settings), self.user_id)

    def test_wrong_password_and_unknown_email_are_indistinguishable(self) -> None:
        wrong_password = self.login("alice@x.com", "wrong")
        unknown_email = self.login("nobody@x.com", "secret1")
        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_email.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_email.json())
        self.assertEqual(wrong_password.json()["message"], "Invalid credentials")

    def test_malformed_email_is_validation_error(self) -> None:
        resp = self.login("alice", "secret1")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["errors"][0]["field"], "email")


class TestNormalizeEmail(unittest.TestCase):
    def test_trims_and_lowercases(self) -> None:
        self.assertEqual(normalize_email("  Dana+Work@Example.COM "), "dana+work@example.com")

    def test_malformed_addresses_raise_value_error(self) -> None:
        for value in ["", "alice", "alice@", "@x.com", "a b@x.com"]:
            with self.assertRaises(ValueError):
                normalize_email(value)

    def test_hostile_input_is_rejected_quickly(self) -> None:
        started = time.monotonic()
        for value in ["a" * 5000 + "!", "a." * 2500 + "@x.com", "a@" + "b-" * 2500]:
            with self.assertRaises(ValueError):
                normalize_email(value)
        self.assertLess(time.monotonic() - started, 1.0)

    def test_hostile_input_over_http_is_a_validation_error(self) -> None:
        harness = AppHarness()
        try:
            started = time.monotonic()
            resp = harness.client.post(
                "/api/auth/forgot-password", json={"email": "a" * 5000 + "!"}
            )
            self.assertLess(time.monotonic() - started, 2.0)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.json()["errors"][0]["field"], "email")
        finally:
            harness.close()


class TestMe(AuthApiTestCase):
    def test_me_returns_current_user(self) -> None:
        token = self.signup().json()["token"]
        resp = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["username"], "alice")
        self.assertNotIn("password_hash", resp.json())

    def test_missing_token_is_401(self) -> None:
        resp = self.client.get("/api/auth/me")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["code"], "authentication_failed")
        self.assertEqual(resp.headers["www-authenticate"], "Bearer")

    def test_invalid_token_is_401(self) -> None:
        resp = self.client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
        self.assertEqual(resp.status_code, 401)

    def test_token_for_deleted_user_is_401(self) -> None:
        token = self.signup().json()["token"]
        db = self.harness.session()
        try:
            db.query(User).delete()
            db.commit()
        finally:
            db.close()
        resp = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 401)


class TestForgotPassword(AuthApiTestCase):
    def test_same_answer_whether_or_not_account_exists(self) -> None:
        self.signup()
        known = self.client.post("/api/auth/forgot-password", json={"email": "alice@x.com"})
        unknown = self.client.post("/api/auth/forgot-password", json={"email": "nobody@x.com"})
        self.assertEqual(known.status_code, 200)
        self.assertEqual(unknown.status_code, 200)
        self.assertEqual(known.json(), unknown.json())
        self.assertEqual(known.json()["message"], FORGOT_PASSWORD_MESSAGE)

    def test_grant_is_stored_for_existing_account(self) -> None:
        self.signup()
        self.client.post("/api/auth/forgot-password", json={"email": "alice@x.com"})
        user = self.harness.get_user("alice@x.com")
        self.assertIsNotNone(user.reset_token)
        self.assertTrue(user.has_valid_reset_grant())
        self.assertEqual(self.harness.count_users(), 1)


class TestRoot(AuthApiTestCase):
    def test_root_message(self) -> None:
        resp = self.client.get("/")
        self.assertEqual(resp.json(), {"message": "Welcome to Notes API"})

    def test_health(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertTrue(body["google_oauth"])


if __name__ == "__main__":
    unittest.main()
