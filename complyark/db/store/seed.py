# complyark/db/store/seed.py
"""Idempotent seeding of the status catalogue, industries and demo tenant"""
from complyark.core import tracing as logger
from complyark.core.catalogue import industry_catalogue, status_catalogue
from complyark.core.records import Organisation, User, UserRole
from complyark.db.store.base import CaseStore


async def seed_reference_data(store: CaseStore) -> None:
    """Insert any catalogue status or industry the store does not have yet"""
    async with store.atomic():
        for status in status_catalogue():
            if await store.get_status(status.id) is None:
                await store.add_status(status)

        known_industries = {industry.name for industry in await store.list_industries()}
        for industry in industry_catalogue():
            if industry.name not in known_industries:
                await store.add_industry(industry)

    logger.info("Reference data seeded")


async def seed_demo_data(store: CaseStore) -> None:
    """Demo organisation with a system admin, an org admin and one staff user"""
    if await store.get_user_by_email("admin@democorp.com") is not None:
        return

    async with store.atomic():
        organisation = await store.add_organisation(Organisation(
            business_name="Demo Corp",
            business_address="123 Main St, Chennai, Tamil Nadu, 600001",
            industry_id=1,
            contact_person_name="John Doe",
            contact_email_address="john.doe@democorp.com",
            contact_phone_number="9876543210",
            no_of_users=10,
            remarks="Demo organization",
        ))
        await store.add_user(User(
            first_name="complyark", last_name="admin", email="complyarkadmin@complyark.local",
            phone="9999999999", role=UserRole.ADMIN, organisation_id=0,
        ))
        await store.add_user(User(
            first_name="admin", email="admin@democorp.com", phone="8888888888",
            role=UserRole.ADMIN, organisation_id=organisation.id,
        ))
        await store.add_user(User(
            first_name="User", last_name="One", email="user1@democorp.com", phone="7777777777",
            role=UserRole.USER, organisation_id=organisation.id,
        ))

    logger.info("Demo organisation seeded", organisation_id=organisation.id)
