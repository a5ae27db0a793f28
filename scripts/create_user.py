"""
Create a FlickPick user from the command line.
Run from the project root:

    python scripts/create_user.py

You will be prompted for username, email, password and birthday.
"""

import getpass
import os
import sys
from datetime import date

# Make sure the project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flickpick.config import get_settings
from flickpick.core.exceptions import DuplicateIdentityError
from flickpick.core.security import PasswordHasher
from flickpick.database import SessionLocal, init_db
from flickpick.services.users import UserService


def main():
    init_db()

    db = SessionLocal()
    try:
        print("\n── FlickPick · Create User ──\n")

        username = input("Username: ").strip()
        if not username:
            print("Username cannot be empty.")
            return

        email = input("Email: ").strip()
        if "@" not in email:
            print("Email does not appear to be valid.")
            return

        password = getpass.getpass("Password: ")
        if not password:
            print("Password cannot be empty.")
            return

        try:
            birthday = date.fromisoformat(input("Birthday (YYYY-MM-DD): ").strip())
        except ValueError:
            print("Birthday must be a date in YYYY-MM-DD format.")
            return

        service = UserService(db, PasswordHasher.from_settings(get_settings()))
        try:
            user = service.create_user(username, email, password, birthday)
        except DuplicateIdentityError as exc:
            print(exc.message)
            return
        print(f"\n✓ User created: {user.username} (id: {user.id})\n")

    finally:
        db.close()


if __name__ == "__main__":
    main()
