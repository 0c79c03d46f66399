"""
update_user_role.py
-------------------
Operator script to change a user's role, looked up by email.

Needs SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (environment or .env).

Usage:
    $ python update_user_role.py <email> <role>

Example:
    $ python update_user_role.py admin@example.com manager
"""

import argparse
import sys

from loguru import logger

from rental_manager.config import Config, setup_logging
from rental_manager.exceptions import BackendError, InvalidRoleError
from rental_manager.models.backend import Backend
from rental_manager.services.user_service import UserService
from rental_manager.utils.constants import Role


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Update a user's role.")
    parser.add_argument("email")
    parser.add_argument("role", help="one of: " + ", ".join(r.value for r in Role))
    return parser.parse_args(argv)


def main(argv=None, backend=None) -> int:
    args = parse_args(argv)
    setup_logging(Config.LOG_LEVEL)

    if Role.parse(args.role) is None:
        logger.error(f"Invalid role. Must be one of: {', '.join(r.value for r in Role)}")
        return 1

    if backend is None:
        if not Config.SUPABASE_URL or not Config.SUPABASE_SERVICE_ROLE_KEY:
            logger.error("Missing environment variables. Make sure SUPABASE_URL and "
                         "SUPABASE_SERVICE_ROLE_KEY are set.")
            return 1
        backend = Backend.from_config(Config.as_dict(), service_role=True)

    try:
        user = backend.find_user_by_email(args.email)
        if not user:
            logger.error(f"User with email {args.email} not found.")
            return 1

        logger.info(f"Found user: {args.email} ({user['id']})")
        logger.info(f"Current role: {user.get('role')}")
        logger.info(f"New role: {args.role}")

        UserService.update_role(backend, user["id"], args.role)
    except (BackendError, InvalidRoleError) as e:
        logger.error(f"Error updating user role: {e.message}")
        return 1

    logger.info(f"Successfully updated user role to {args.role}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
