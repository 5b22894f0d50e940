"""
Bootstrap seeding - demo users and the pre-created batch group

Safe to run on every startup: users are keyed on email and pre-created
groups on name.
"""
import logging

from .application.services import GroupRegistryService
from .config import settings
from .infrastructure import Repositories

logger = logging.getLogger(__name__)

SEED_USERS = [
    {
        "email": "student1@aimsr.edu",
        "name": "Student One",
        "course": "MCA",
        "batch": "2023",
        "bio": "Hey!",
    },
    {
        "email": "student2@aimsr.edu",
        "name": "Student Two",
        "course": "BCA",
        "batch": "2024",
        "bio": "Hi there!",
    },
]


async def seed(repositories: Repositories) -> None:
    """Insert seed users and the pre-created group if they are missing"""
    inserted = 0
    for user in SEED_USERS:
        if await repositories.users.create_if_absent(**user):
            inserted += 1

    owner = await repositories.users.find_by_email(SEED_USERS[0]["email"])
    registry = GroupRegistryService(repositories.groups)
    await registry.seed_group(settings.SEED_GROUP_NAME, owner.id if owner else None)

    logger.info(f"Seeding complete ({inserted} new users)")
