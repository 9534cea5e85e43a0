"""
Tests for the maintenance commands in ``manage.py``.
"""

from __future__ import annotations

import sqlite3

import pytest

import manage
from copallet_api.app.core.config import settings
from copallet_api.app.core.security import decode_access_token, verify_password


@pytest.fixture
def db_file(client):
    """Path of the seeded database file used by the ``client`` fixture."""
    return settings.database_url


class TestCreateToken:
    def test_prints_valid_token(self, db_file, capsys) -> None:
        assert manage.main(["create-token", "--email", "admin@copallet.com", "--days", "1"]) == 0
        token = capsys.readouterr().out.strip()
        payload = decode_access_token(token)
        assert payload["role"] == "admin"
        assert payload["sub"] == "admin@copallet.com"

    def test_unknown_email(self, db_file, capsys) -> None:
        assert manage.main(["create-token", "--email", "ghost@example.com"]) == 2
        assert "No user found" in capsys.readouterr().err


class TestResetPassword:
    def test_updates_hash(self, db_file) -> None:
        code = manage.main(["reset-password", "--db", db_file, "--email", "carrier@example.com",
                            "--password", "n3w-password"])
        assert code == 0
        conn = sqlite3.connect(db_file)
        try:
            stored = conn.execute("SELECT password FROM users WHERE email = ?", ("carrier@example.com",)).fetchone()[0]
        finally:
            conn.close()
        assert verify_password("n3w-password", stored)

    def test_missing_database(self, tmp_path) -> None:
        assert manage.main(["reset-password", "--db", str(tmp_path / "none.db"), "--email", "a@b.com",
                            "--password", "secret1"]) == 1

    def test_short_password(self, db_file) -> None:
        assert manage.main(["reset-password", "--db", db_file, "--email", "carrier@example.com",
                            "--password", "123"]) == 1

    def test_prompts_when_password_missing(self, db_file, monkeypatch) -> None:
        monkeypatch.setattr(manage.getpass, "getpass", lambda prompt: "prompted-pass")
        assert manage.main(["reset-password", "--db", db_file, "--email", "carrier@example.com"]) == 0


class TestSeedSummary:
    def test_prints_counts(self, db_file, capsys) -> None:
        assert manage.main(["seed-summary"]) == 0
        lines = capsys.readouterr().out.splitlines()
        counts = dict(line.split() for line in lines)
        assert counts["users"] == "6"
        assert counts["shipments"] == "6"
        assert counts["blog_posts"] == "3"
