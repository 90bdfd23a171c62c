"""
Authentication tests.

Verifies:
- Bad credentials never write a session
- A good login writes a 30-day session
- Password change re-verifies the current password and enforces length
- First-run provisioning happens exactly once
"""

import json
from datetime import timedelta

import pytest

from stockroom.errors import AuthError, NotFoundError, ValidationError
from stockroom.extensions import db
from stockroom.models import User
from stockroom.services import auth_service, session_service
from stockroom.services.concurrency import atomic
from stockroom.services.storage_service import provision_admin
from stockroom.time_utils import parse_iso_datetime, utcnow

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME


class TestPasswordHashing:
    def test_hash_and_verify(self, app):
        hashed = auth_service.hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert auth_service.verify_password("s3cret-pass", hashed)
        assert not auth_service.verify_password("wrong", hashed)

    def test_malformed_hash_is_a_mismatch(self, app):
        assert not auth_service.verify_password("anything", "not-a-bcrypt-hash")

    def test_non_string_password_is_a_mismatch(self, app):
        hashed = auth_service.hash_password("12345678")
        assert not auth_service.verify_password(12345678, hashed)
        assert not auth_service.verify_password(None, hashed)

    def test_non_string_new_password_rejected(self, app):
        with pytest.raises(ValidationError):
            auth_service.validate_password_strength(123456789)


class TestAuthenticate:
    def test_wrong_password_twice_then_correct(self, app):
        path = session_service.session_path()

        for _ in range(2):
            with pytest.raises(AuthError) as excinfo:
                auth_service.authenticate(ADMIN_USERNAME, "wrong-password")
            assert str(excinfo.value) == auth_service.INVALID_CREDENTIALS
            assert not path.exists()

        before = utcnow()
        session = auth_service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD)

        assert path.exists()
        stored = json.loads(path.read_text(encoding="utf-8"))
        assert stored == session
        assert len(session["token"]) == 64
        assert session["expires_at"].endswith("Z")

        expires_at = parse_iso_datetime(session["expires_at"])
        expected = before + timedelta(days=30)
        assert abs((expires_at - expected).total_seconds()) < 60

    def test_unknown_user_same_error(self, app):
        with pytest.raises(AuthError) as excinfo:
            auth_service.authenticate("mallory", ADMIN_PASSWORD)
        assert str(excinfo.value) == auth_service.INVALID_CREDENTIALS
        assert not session_service.session_path().exists()

    def test_unknown_user_still_checks_a_hash(self, app, monkeypatch):
        checked = []
        real_verify = auth_service.verify_password

        def recording_verify(password, password_hash):
            checked.append(password_hash)
            return real_verify(password, password_hash)

        monkeypatch.setattr(auth_service, "verify_password", recording_verify)

        with pytest.raises(AuthError):
            auth_service.authenticate("mallory", ADMIN_PASSWORD)
        with pytest.raises(AuthError):
            auth_service.authenticate(ADMIN_USERNAME, "wrong-password")

        assert len(checked) == 2
        assert all(h.startswith("$2") for h in checked)

    def test_each_login_issues_a_new_token(self, app):
        first = auth_service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD)
        second = auth_service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD)
        assert first["token"] != second["token"]
        assert session_service.load_session()["token"] == second["token"]


class TestChangePassword:
    def test_six_characters_rejected(self, app):
        with pytest.raises(ValidationError):
            auth_service.change_password(ADMIN_PASSWORD, "abc123")

        auth_service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD)
        with pytest.raises(AuthError):
            auth_service.authenticate(ADMIN_USERNAME, "abc123")

    def test_non_string_new_password(self, app):
        with pytest.raises(ValidationError):
            auth_service.change_password(ADMIN_PASSWORD, 123456789)
        auth_service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD)

    def test_wrong_current_password(self, app):
        with pytest.raises(ValidationError) as excinfo:
            auth_service.change_password("not-it", "a-long-new-password")
        assert str(excinfo.value) == "Current password is incorrect"

    def test_success(self, app):
        auth_service.change_password(ADMIN_PASSWORD, "a-long-new-password")

        auth_service.authenticate(ADMIN_USERNAME, "a-long-new-password")
        with pytest.raises(AuthError):
            auth_service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD)

    def test_no_administrator(self, app):
        with atomic():
            db.session.query(User).delete()
        with pytest.raises(NotFoundError):
            auth_service.change_password(ADMIN_PASSWORD, "a-long-new-password")


class TestProvisioning:
    def test_administrator_created_once(self, app):
        with atomic():
            assert db.session.query(User).count() == 1
        assert provision_admin() is None

    def test_generated_password_when_none_configured(self, app):
        with atomic():
            db.session.query(User).delete()
        app.config["ADMIN_PASSWORD"] = None

        user, generated = provision_admin(username="owner")

        assert user["username"] == "owner"
        assert generated
        auth_service.authenticate("owner", generated)

    def test_configured_password_is_not_returned(self, app):
        with atomic():
            db.session.query(User).delete()

        user, generated = provision_admin()

        assert user["username"] == ADMIN_USERNAME
        assert generated is None
