"""Tests for notekeeper.core.config.Settings validation."""

import unittest

from pydantic import ValidationError

from support import make_settings


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = make_settings()
        self.assertEqual(settings.JWT_EXPIRE_MINUTES, 7 * 24 * 60)
        self.assertEqual(settings.RESET_TOKEN_EXPIRE_MINUTES, 60)
        self.assertEqual(settings.API_PREFIX, "/api")
        self.assertTrue(settings.google_configured)

    def test_settings_are_immutable(self) -> None:
        settings = make_settings()
        with self.assertRaises(ValidationError):
            settings.JWT_SECRET = "other"

    def test_rejects_empty_jwt_secret(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(JWT_SECRET="  ")

    def test_rejects_default_secret_in_prod(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(APP_ENV="prod", JWT_SECRET="change-me-in-production")

    def test_rejects_out_of_range_values(self) -> None:
        for field, value in (
            ("JWT_EXPIRE_MINUTES", 0),
            ("JWT_EXPIRE_MINUTES", 10081),
            ("BCRYPT_ROUNDS", 3),
            ("OAUTH_REQUEST_TIMEOUT_SEC", 0),
            ("LOG_LEVEL", "LOUD"),
        ):
            with self.assertRaises(ValidationError, msg=field):
                make_settings(**{field: value})

    def test_rejects_unsupported_database_url(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(DATABASE_URL="mysql://localhost/notes")

    def test_urls_are_normalized(self) -> None:
        settings = make_settings(FRONTEND_URL="http://frontend.test/ ", API_PREFIX="/api/")
        self.assertEqual(settings.FRONTEND_URL, "http://frontend.test")
        self.assertEqual(settings.API_PREFIX, "/api")

    def test_callback_url_derived_from_backend_url(self) -> None:
        settings = make_settings(BACKEND_URL="https://notes.example.com")
        self.assertEqual(
            settings.google_callback_url,
            "https://notes.example.com/api/auth/google/callback",
        )
        explicit = make_settings(GOOGLE_CALLBACK_URL="https://cb.example.com/google")
        self.assertEqual(explicit.google_callback_url, "https://cb.example.com/google")

    def test_google_not_configured_without_secret(self) -> None:
        self.assertFalse(make_settings(GOOGLE_CLIENT_SECRET=None).google_configured)
        self.assertFalse(make_settings(GOOGLE_CLIENT_ID="").google_configured)


if __name__ == "__main__":
    unittest.main()
