"""
Create a user (e.g. first admin). Run from project root:
  python -m blogcms.scripts.create_user EMAIL USERNAME PASSWORD [role]
Example:
  python -m blogcms.scripts.create_user admin@example.com admin 'Str0ngP@ssword!' ADMIN
"""
import argparse
import sys

from pydantic import ValidationError as PydanticValidationError

from blogcms.core.database import SessionLocal
from blogcms.core.errors import Conflict
from blogcms.models import Role
from blogcms.schemas.user import UserCreateRequest
from blogcms.services.users import create_user


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Blog CMS user.")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument("username", help="Unique username (3-255 chars)")
    parser.add_argument("password", help="8+ chars with upper, lower, digit and symbol")
    parser.add_argument("role", nargs="?", default=Role.ADMIN.value, choices=[r.value for r in Role])
    args = parser.parse_args()

    try:
        body = UserCreateRequest(
            email=args.email,
            username=args.username.strip(),
            password=args.password,
            role=Role(args.role),
        )
    except PydanticValidationError as e:
        for err in e.errors():
            print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = create_user(
            db,
            email=body.email,
            username=body.username,
            password=body.password,
            role=body.role,
        )
    except Conflict as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.username}' <{user.email}> with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
