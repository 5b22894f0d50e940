"""
Application services - Business logic layer

Every method takes the acting viewer explicitly; nothing here reads request
state.
"""
from typing import List, Optional, Set, Union
import logging

from ..domain.models import (
    Comment,
    FollowType,
    Group,
    GroupListing,
    Message,
    Post,
    RosterEntry,
    User,
    UserSummary,
    WriteResult,
    resolve_audience,
)
from ..domain.policies import GroupAccessPolicy
from ..domain.repositories import (
    IFollowRepository,
    IGroupRepository,
    IMembershipRepository,
    IMessageRepository,
    IPostRepository,
    IUserRepository,
)
from ..errors import NotFoundError, ValidationError
from ..kafka_producer import KafkaProducerManager

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class RelationshipService:
    """Follow edges between users and from users to groups"""

    def __init__(self, follow_repository: IFollowRepository, kafka: KafkaProducerManager):
        self.follow_repo = follow_repository
        self.kafka = kafka

    async def follow(
        self, viewer_id: int, target_id: int, follow_type: Union[FollowType, str]
    ) -> bool:
        """
        Follow a user or a group

        Repeated calls are no-ops. The target is not checked for existence.

        Returns:
            True if a new edge was stored
        """
        try:
            follow_type = FollowType(follow_type)
        except ValueError:
            raise ValidationError(
                f"Follow type must be one of: {', '.join(t.value for t in FollowType)}",
                field="type",
            )
        if target_id is None:
            raise ValidationError("Missing follow target", field="target_id")

        created = await self.follow_repo.follow(viewer_id, target_id, follow_type)
        if created:
            logger.info(f"User {viewer_id} followed {follow_type.value} {target_id}")
            await self.kafka.publish_follow_event(viewer_id, target_id, follow_type.value)
        else:
            logger.debug(f"User {viewer_id} already follows {follow_type.value} {target_id}")
        return created

    async def followed_user_ids(self, viewer_id: int) -> Set[int]:
        return await self.follow_repo.followed_ids(viewer_id, FollowType.USER)

    async def followed_group_ids(self, viewer_id: int) -> Set[int]:
        return await self.follow_repo.followed_ids(viewer_id, FollowType.GROUP)


class GroupRegistryService:
    """Group identities and the pre-created flag"""

    def __init__(self, group_repository: IGroupRepository):
        self.group_repo = group_repository

    async def create_group(self, viewer_id: int, name: str) -> Group:
        """Create a user-made group owned by the viewer"""
        if _is_blank(name):
            raise ValidationError("Group name is required", field="name")
        group = await self.group_repo.create(name.strip(), viewer_id)
        logger.info(f"User {viewer_id} created group {group.id} ({group.name})")
        return group

    async def seed_group(self, name: str, creator_id: Optional[int]) -> bool:
        """Create a system group once; later calls with the same name do nothing"""
        created = await self.group_repo.seed(name, creator_id)
        if created:
            logger.info(f"Seeded pre-created group '{name}'")
        return created

    async def list_all(self) -> List[Group]:
        return await self.group_repo.list_all()


class MembershipService:
    """Join requests and the two group access predicates"""

    def __init__(
        self,
        group_repository: IGroupRepository,
        membership_repository: IMembershipRepository,
        follow_repository: IFollowRepository,
        kafka: KafkaProducerManager,
    ):
        self.group_repo = group_repository
        self.membership_repo = membership_repository
        self.follow_repo = follow_repository
        self.kafka = kafka

    async def request_join(self, viewer_id: int, group_id: int) -> bool:
        """
        Ask to join a group

        The first request stores a pending edge; repeats leave it untouched.

        Returns:
            True if a new pending edge was stored
        """
        if group_id is None:
            raise ValidationError("Missing group id", field="group_id")

        created = await self.membership_repo.request_join(group_id, viewer_id)
        if created:
            logger.info(f"User {viewer_id} requested to join group {group_id}")
            await self.kafka.publish_join_requested(group_id, viewer_id)
        return created

    async def list_groups_for_viewer(self, viewer_id: int) -> List[GroupListing]:
        return await self.group_repo.list_for_viewer(viewer_id)

    async def list_roster(self, group_id: int) -> List[RosterEntry]:
        return await self.membership_repo.list_roster(group_id)

    async def access_policy(self, viewer_id: int) -> GroupAccessPolicy:
        """
        Build the viewer's group capabilities

        Following a group and being an approved member are independent. Only
        the first one opens group posts in the feed.
        """
        followed = await self.follow_repo.followed_ids(viewer_id, FollowType.GROUP)
        approved = await self.membership_repo.approved_group_ids(viewer_id)
        return GroupAccessPolicy(
            followed_group_ids=frozenset(followed),
            approved_group_ids=frozenset(approved),
        )


class FeedService:
    """Visibility resolver plus the post, like and comment write paths"""

    def __init__(self, post_repository: IPostRepository, kafka: KafkaProducerManager):
        self.post_repo = post_repository
        self.kafka = kafka

    async def resolve_feed(self, viewer_id: int) -> List[Post]:
        """
        Posts visible to the viewer, newest first

        A post is visible when it is public, when the viewer follows its
        author, or when the viewer follows its group.
        """
        return await self.post_repo.list_visible(viewer_id)

    async def create_post(
        self,
        viewer_id: int,
        content: Optional[str],
        image: Optional[str] = None,
        group_id: Union[int, str, None] = None,
        is_public: bool = False,
    ) -> Post:
        """
        Create a post

        Args:
            viewer_id: Author
            content: Post text
            image: Stored image reference, if any
            group_id: Target group id, or "public"
            is_public: Force a public post whatever group_id says

        Returns:
            The stored post with author and group names; public posts never
            carry a group
        """
        content = content or ""
        if _is_blank(content) and _is_blank(image):
            raise ValidationError("Post needs content or an image", field="content")

        target_group, public = resolve_audience(group_id, is_public)
        created = await self.post_repo.create(viewer_id, content, image, target_group, public)
        post = await self.post_repo.find_by_id(created.id) or created
        logger.info(
            f"User {viewer_id} created post {post.id} "
            f"({'public' if public else f'group {target_group}'})"
        )
        await self.kafka.publish_post_created(post.id, viewer_id, target_group, public)
        return post

    async def increment_like(self, post_id: int) -> WriteResult:
        """Add one like. Unknown posts are left alone and reported as NOT_FOUND."""
        result = await self.post_repo.increment_like(post_id)
        if result == WriteResult.NOT_FOUND:
            logger.warning(f"Like ignored, post {post_id} does not exist")
        return result

    async def add_comment(self, post_id: int, viewer_id: int, content: Optional[str]) -> WriteResult:
        """Append a comment. Unknown posts are left alone and reported as NOT_FOUND."""
        if _is_blank(content):
            raise ValidationError("Comment content is required", field="content")

        result = await self.post_repo.add_comment(post_id, viewer_id, content)
        if result == WriteResult.NOT_FOUND:
            logger.warning(f"Comment ignored, post {post_id} does not exist")
        return result

    async def list_comments(self, post_id: int) -> List[Comment]:
        return await self.post_repo.list_comments(post_id)


class MessagingService:
    """Pairwise message threads"""

    def __init__(self, message_repository: IMessageRepository, kafka: KafkaProducerManager):
        self.message_repo = message_repository
        self.kafka = kafka

    async def send(
        self, viewer_id: int, receiver_id: Optional[int], content: Optional[str]
    ) -> Message:
        """Send a message. Both the receiver and non-blank content are required."""
        if receiver_id is None:
            raise ValidationError("Missing receiver", field="receiver_id")
        if _is_blank(content):
            raise ValidationError("Missing message content", field="content")

        message = await self.message_repo.create(viewer_id, receiver_id, content)
        logger.debug(f"Message {message.id} sent from {viewer_id} to {receiver_id}")
        await self.kafka.publish_message_sent(message.id, viewer_id, receiver_id)
        return message

    async def list_thread(self, viewer_id: int, other_user_id: int) -> List[Message]:
        """Conversation transcript, oldest first"""
        return await self.message_repo.list_thread(viewer_id, other_user_id)


class UserService:
    """Profiles and the member directory"""

    def __init__(self, user_repository: IUserRepository):
        self.user_repo = user_repository

    async def provision(
        self,
        email: str,
        name: Optional[str],
        course: Optional[str] = None,
        batch: Optional[str] = None,
    ) -> User:
        """
        Make sure an authenticated identity has a campus profile

        The profile is keyed on email. An existing row is returned untouched.

        Args:
            email: Verified email from the auth service
            name: Display name; the email local part when missing
            course: Course, if the identity carries one
            batch: Batch year, if the identity carries one

        Returns:
            The campus user for this identity
        """
        if _is_blank(email):
            raise ValidationError("Identity has no email", field="email")

        display_name = name if not _is_blank(name) else email.split("@")[0]
        if await self.user_repo.create_if_absent(email, display_name, course, batch):
            logger.info(f"Provisioned profile for {email}")

        user = await self.user_repo.find_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_profile(self, viewer_id: int) -> User:
        user = await self.user_repo.find_by_id(viewer_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile(
        self, viewer_id: int, bio: Optional[str], profile_pic: Optional[str] = None
    ) -> WriteResult:
        """Replace the bio; keep the current picture unless a new one is given"""
        result = await self.user_repo.update_profile(viewer_id, bio or "", profile_pic)
        if result == WriteResult.NOT_FOUND:
            logger.warning(f"Profile update ignored, user {viewer_id} does not exist")
        return result

    async def list_other_users(self, viewer_id: int) -> List[UserSummary]:
        return await self.user_repo.list_others(viewer_id)
