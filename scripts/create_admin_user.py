"""
Create a system or organisation administrator for the ComplyArk API
"""
import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from complyark.core.records import User, UserRole
from complyark.db.database import AsyncSessionLocal, init_db
from complyark.db.store import SqlCaseStore
from complyark.utils.validators import EmailValidator
from loguru import logger


async def create_admin_user():
    """Create an administrator interactively"""
    logger.info("👤 Creating administrator for ComplyArk API...")

    email = EmailValidator.normalize_email(input("Enter admin email: "))
    if not EmailValidator.has_minimal_format(email):
        logger.error("A valid email is required")
        return

    first_name = input("Enter first name: ").strip()
    if not first_name:
        logger.error("First name is required")
        return
    last_name = input("Enter last name: ").strip()

    organisation_input = input("Organisation id (blank for a system administrator): ").strip()
    if organisation_input and not organisation_input.isdigit():
        logger.error("Organisation id must be a number")
        return
    organisation_id = int(organisation_input or 0)

    await init_db()

    async with AsyncSessionLocal() as db:
        store = SqlCaseStore(db)
        try:
            if await store.get_user_by_email(email):
                logger.warning(f"User {email} already exists")
                return

            if organisation_id and await store.get_organisation(organisation_id) is None:
                logger.error(f"Organisation {organisation_id} not found")
                return

            async with store.atomic():
                user = await store.add_user(User(
                    first_name=first_name,
                    last_name=last_name,
                    email=email,
                    role=UserRole.ADMIN,
                    organisation_id=organisation_id,
                ))
            logger.info(f"✅ Administrator created: {user.email} (ID: {user.id})")

        except Exception as e:
            logger.error(f"❌ Failed to create admin user: {e}")
            raise

if __name__ == "__main__":
    asyncio.run(create_admin_user())
