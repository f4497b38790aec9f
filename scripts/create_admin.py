import getpass
import sys

from choir.core.config import Settings
from choir.domain.models import MemberRole, MemberStatus
from choir.domain.models.member import STUDENT_ID_PATTERN, student_email
from choir.infrastructure.persistence.sqlite import SQLiteDatabase
from choir.infrastructure.repositories.member_repository import MemberRepository
from choir.services.password_service import PasswordHasher


def main() -> None:
    settings = Settings()

    student_id = (settings.admin_student_id or input("Administrator student ID (ex: AD12345678): ")).strip().upper()
    if not STUDENT_ID_PATTERN.match(student_id):
        raise RuntimeError("Student ID must be 2 letters followed by 8 digits.")

    database = SQLiteDatabase(settings.database_path)
    members = MemberRepository(database)
    try:
        if members.get_member_by_student_id(student_id):
            print("Account", student_id, "already exists.")
            return

        first_name = input("First name: ").strip() or "Choir"
        last_name = input("Last name: ").strip() or "Admin"
        password = settings.admin_password or getpass.getpass("Password: ")
        if len(password) < 6:
            raise RuntimeError("Password must be at least 6 characters long.")

        member = members.create_member(
            first_name=first_name,
            last_name=last_name,
            student_id=student_id,
            email=student_email(student_id, settings.student_email_domain),
            password_hash=PasswordHasher(rounds=settings.bcrypt_rounds).hash(password),
            role=MemberRole.ADMIN,
            status=MemberStatus.ACTIVE,
            email_verified=True,
        )
        print("Administrator created:", member.student_id, member.email)
    finally:
        database.close()


if __name__ == "__main__":
    try:
        main()
    except RuntimeError as exc:
        sys.exit(str(exc))
