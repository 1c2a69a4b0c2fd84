"""Tests for error translation and settings."""

from datetime import timedelta

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import DataError, IntegrityError, OperationalError

from smart_restaurant.core.config import QrTokenConfig, Settings
from smart_restaurant.core.db_errors import map_sql_error, translate_db_errors
from smart_restaurant.core.errors import (
    BadRequest, Conflict, NotFound, TokenMissing, UpstreamFailure, UpstreamScoringFailure,
)
from smart_restaurant.models import MenuCategory


class FakeDriverError(Exception):
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


def integrity(message, pgcode=None):
    return IntegrityError("INSERT ...", {}, FakeDriverError(message, pgcode))


# ============== Error envelope ==============

class TestAppErrors:

    def test_envelope(self):
        assert NotFound("Table not found").to_dict() == {"detail": "Table not found", "error": "not_found"}

    def test_extra_fields(self):
        err = BadRequest("Cannot deactivate", activeOrderCount=2)
        assert err.to_dict() == {"detail": "Cannot deactivate", "error": "bad_request", "activeOrderCount": 2}

    def test_scoring_failure_is_upstream_failure(self):
        err = UpstreamScoringFailure()
        assert isinstance(err, UpstreamFailure)
        assert err.status_code == 500
        assert err.to_dict()["error"] == "scoring_failure"

    def test_token_missing_headers(self):
        assert TokenMissing().headers == {"WWW-Authenticate": "QR-Token"}
        assert NotFound().headers is None


# ============== SQL error mapping ==============

class TestMapSqlError:

    def test_postgres_unique_violation(self):
        err = map_sql_error(integrity("duplicate key", "23505"), "Table number already exists")
        assert isinstance(err, Conflict)
        assert err.message == "Table number already exists"

    def test_sqlite_unique_violation(self):
        err = map_sql_error(integrity("UNIQUE constraint failed: menu_categories.name"))
        assert isinstance(err, Conflict)
        assert err.message == "Resource already exists"

    @pytest.mark.parametrize("pgcode", ["23503", "23502", "23514"])
    def test_reference_and_check_violations(self, pgcode):
        assert isinstance(map_sql_error(integrity("violation", pgcode)), BadRequest)

    def test_data_error(self):
        err = map_sql_error(DataError("SELECT", {}, FakeDriverError("invalid input syntax")))
        assert isinstance(err, BadRequest)

    def test_other_errors_are_upstream(self):
        err = map_sql_error(OperationalError("SELECT", {}, FakeDriverError("server closed the connection")))
        assert isinstance(err, UpstreamFailure)
        assert "server closed" not in err.message

    def test_translate_rolls_back(self, db_session, restaurant):
        db_session.add(MenuCategory(restaurant_id=restaurant.id, name="Dup"))
        db_session.commit()

        with pytest.raises(Conflict):
            with translate_db_errors(db_session, "Category name already exists"):
                db_session.add(MenuCategory(restaurant_id=restaurant.id, name="Dup"))
                db_session.commit()

        # Session is usable again after the rollback
        assert db_session.query(MenuCategory).count() == 1


# ============== Settings ==============

class TestSettings:

    def test_qr_config_falls_back_to_secret_key(self):
        s = Settings(secret_key="k" * 40, qr_token_secret=None, qr_token_expires_in="30d")
        config = QrTokenConfig.from_settings(s)
        assert config.secret == "k" * 40
        assert config.expires_in == timedelta(days=30)

    def test_qr_config_uses_own_secret(self):
        s = Settings(secret_key="k" * 40, qr_token_secret="q" * 40, qr_token_leeway_seconds=5)
        config = QrTokenConfig.from_settings(s)
        assert config.secret == "q" * 40
        assert config.leeway == 5
        assert config.expires_in is None

    def test_qr_config_is_immutable(self):
        config = QrTokenConfig(secret="s" * 40)
        with pytest.raises(AttributeError):
            config.secret = "other"

    def test_invalid_duration_rejected(self):
        with pytest.raises(ValidationError):
            Settings(secret_key="k" * 40, qr_token_expires_in="forever")

    def test_production_requires_real_secret(self):
        with pytest.raises(ValidationError):
            Settings(debug=False, secret_key="change-me-in-production")

    def test_production_rejects_short_qr_secret(self):
        with pytest.raises(ValidationError):
            Settings(debug=False, secret_key="k" * 40, qr_token_secret="short")

    def test_cors_origins_drop_localhost_in_production(self):
        s = Settings(debug=False, secret_key="k" * 40, cors_origins="https://app.example.com,http://localhost:3000")
        assert s.cors_origins_list == ["https://app.example.com"]


# ============== App surface ==============

class TestAppSurface:

    def test_health(self, client):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.json() == {"status": "ok"}

    def test_readiness(self, client):
        res = client.get("/health/ready")
        assert res.status_code == 200
        assert res.json()["database"] == "ok"

    def test_security_headers(self, client):
        res = client.get("/health")
        assert res.headers["X-Content-Type-Options"] == "nosniff"
        assert res.headers["X-Frame-Options"] == "DENY"
