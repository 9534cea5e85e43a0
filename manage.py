#!/usr/bin/env python3
"""
Maintenance commands for the CoPallet API.

    python manage.py create-token --email admin@copallet.com --days 365
    python manage.py reset-password --db ./copallet.db --email admin@copallet.com
    python manage.py seed-summary

``create-token`` signs an access token for a user of the configured
database.  ``reset-password`` sets a new PBKDF2 hash for a user of a
file-backed SQLite database; it never reads or reveals the old
password.  ``seed-summary`` loads the demo data into the configured
database (in memory by default) and prints the row counts.
"""

import argparse
import getpass
import os
import sqlite3
import sys
from typing import List, Optional

from copallet_api.app.core.db import get_connection, init_db, reset_db
from copallet_api.app.core.security import create_access_token, hash_password
from copallet_api.app.core.seed import seed_database


def create_token(email: str, days: int) -> int:
    init_db()
    conn = get_connection()
    try:
        row = conn.execute("SELECT id, email, role FROM users WHERE email = ?", (email.lower(),)).fetchone()
    finally:
        conn.close()
    if not row:
        print(f"[!] No user found with email: {email}", file=sys.stderr)
        return 2
    token = create_access_token(
        {"sub": row["email"], "user_id": row["id"], "role": row["role"]},
        expires_delta=days * 24 * 60 * 60,
    )
    print(token)
    return 0


def reset_password(db: str, email: str, password: Optional[str]) -> int:
    if not os.path.exists(db):
        print(f"[!] DB not found: {db}", file=sys.stderr)
        return 1
    new_password = password or getpass.getpass("Enter NEW password: ")
    if len(new_password) < 6:
        print("[!] Password must be at least 6 characters.", file=sys.stderr)
        return 1

    conn = sqlite3.connect(db)
    try:
        cur = conn.cursor()
        cur.execute("SELECT id FROM users WHERE email = ?", (email.lower(),))
        if not cur.fetchone():
            print(f"[!] No user found with email: {email}", file=sys.stderr)
            return 2
        cur.execute(
            "UPDATE users SET password = ?, updated_at = strftime('%Y-%m-%dT%H:%M:%SZ', 'now') WHERE email = ?",
            (hash_password(new_password), email.lower()),
        )
        conn.commit()
    finally:
        conn.close()
    print(f"[+] Password updated for user: {email}")
    return 0


def seed_summary() -> int:
    reset_db()
    init_db()
    counts = seed_database()
    width = max(len(name) for name in counts)
    for name, count in counts.items():
        print(f"{name.ljust(width)}  {count}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CoPallet API maintenance commands.")
    sub = parser.add_subparsers(dest="command", required=True)

    token = sub.add_parser("create-token", help="Print an access token for a user")
    token.add_argument("--email", required=True, help="User email")
    token.add_argument("--days", type=int, default=365, help="Token lifetime in days (default 365)")

    reset = sub.add_parser("reset-password", help="Set a new password in a SQLite database file")
    reset.add_argument("--db", required=True, help="Path to the SQLite DB file")
    reset.add_argument("--email", required=True, help="User email to update")
    reset.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")

    sub.add_parser("seed-summary", help="Seed the configured database and print row counts")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "create-token":
        return create_token(args.email, args.days)
    if args.command == "reset-password":
        return reset_password(args.db, args.email, args.password)
    return seed_summary()


if __name__ == "__main__":
    sys.exit(main())
