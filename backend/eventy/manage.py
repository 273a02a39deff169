"""
Out-of-band administration for Eventy.

    eventy-admin init-db
    eventy-admin create-admin --email admin@eventy.com --name "Admin User" --password admin123
    eventy-admin promote --email someone@example.com
    eventy-admin serve
"""

import argparse
import asyncio
import sys
from typing import Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy.ext.asyncio import AsyncSession

from eventy.core.config import get_settings
from eventy.core.exceptions import ConflictError, NotFoundError
from eventy.core.logging import setup_logging, get_logger
from eventy.db.base import Base
from eventy.db.session import AsyncSessionLocal, engine
from eventy.models import User
from eventy.models.user import ROLE_ADMIN
from eventy.schemas.user import UserCreate
from eventy.services.auth_service import get_user_by_email, register_user

logger = get_logger(__name__)


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    logger.info("tables_created", tables=sorted(Base.metadata.tables))


async def create_admin(db: AsyncSession, email: str, name: str, password: str) -> User:
    """Create an admin account. Raises ConflictError if the email is taken."""
    user_data = UserCreate(name=name, email=email, password=password)
    user = await register_user(db, user_data, role=ROLE_ADMIN)
    await db.commit()
    return user


async def promote(db: AsyncSession, email: str) -> User:
    """Give an existing user the admin role."""
    user = await get_user_by_email(db, email)
    if user is None:
        raise NotFoundError(f"No user with email {email}")
    user.role = ROLE_ADMIN
    await db.commit()
    logger.info("user_promoted", user_id=user.id, email=user.email)
    return user


async def _run_with_session(func, *args) -> User:
    try:
        async with AsyncSessionLocal() as db:
            return await func(db, *args)
    finally:
        await engine.dispose()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="eventy-admin", description="Eventy administration")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create all tables")

    create = sub.add_parser("create-admin", help="Create an admin account")
    create.add_argument("--email", default="admin@eventy.com")
    create.add_argument("--name", default="Admin User")
    create.add_argument("--password", required=True)

    promote_cmd = sub.add_parser("promote", help="Grant the admin role to an existing user")
    promote_cmd.add_argument("--email", required=True)

    serve = sub.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--reload", action="store_true")

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging()
    settings = get_settings()

    if args.command == "serve":
        import uvicorn

        uvicorn.run("eventy.main:app", host=settings.HOST, port=settings.PORT, reload=args.reload)
        return 0

    if args.command == "init-db":
        asyncio.run(init_db())
        return 0

    try:
        if args.command == "create-admin":
            user = asyncio.run(_run_with_session(create_admin, args.email, args.name, args.password))
            print(f"Admin user created: {user.email}")
        else:
            user = asyncio.run(_run_with_session(promote, args.email))
            print(f"{user.email} is now an admin")
    except ConflictError:
        print(f"User {args.email} already exists", file=sys.stderr)
        return 1
    except NotFoundError as exc:
        print(exc.message, file=sys.stderr)
        return 1
    except SchemaError as exc:
        for err in exc.errors():
            print(f"{err['loc'][0]}: {err['msg']}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
