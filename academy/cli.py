import argparse
import sys

from .config import get_settings
from .database import SessionLocal, init_db
from .models.profile import ProfileStatus, UserRole
from .services.access import ElevatedAccess
from .services.auth import AuthService
from .services.invitations import InvitationManager


def seed_admin():
    settings = get_settings()

    if not settings.admin_password:
        print("ERROR: ADMIN_PASSWORD environment variable is required.")
        print("Set it in your .env file or export it before running this command.")
        sys.exit(1)

    db = SessionLocal()
    try:
        existing = AuthService.get_profile_by_email(db, settings.admin_email)
        if existing:
            print(f"Admin account already exists: {existing.email}")
            print("No changes made. This is expected if you've already run this command.")
            return

        profile = AuthService.create_profile(
            db,
            email=settings.admin_email,
            password=settings.admin_password,
            role=UserRole.ADMIN,
            full_name="Academy Administrator",
            status=ProfileStatus.APPROVED,
        )
        print(f"Created admin account: {profile.email} (role: {profile.role})")
    finally:
        db.close()


def purge_expired():
    db = SessionLocal()
    try:
        removed = InvitationManager(ElevatedAccess(db=db)).purge_expired()
        print(f"Removed {removed} expired invitation(s)")
    finally:
        db.close()


COMMANDS = {
    "seed-admin": seed_admin,
    "purge-expired": purge_expired,
}


def main(argv=None):
    parser = argparse.ArgumentParser(prog="academy", description="Academy maintenance commands")
    parser.add_argument("command", choices=sorted(COMMANDS))
    args = parser.parse_args(argv)

    init_db()
    COMMANDS[args.command]()


if __name__ == "__main__":
    main()
