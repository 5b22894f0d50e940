"""
Kafka producer for publishing campus events

Publishing is a side channel: a disabled or unreachable broker is logged
and never fails the write that triggered the event.
"""
from aiokafka import AIOKafkaProducer
from typing import Optional, Dict, Any
import json
import logging
from datetime import datetime

from .config import settings

logger = logging.getLogger(__name__)


class KafkaProducerManager:
    """Kafka producer manager for publishing events"""

    def __init__(self):
        self.producer: Optional[AIOKafkaProducer] = None

    async def start(self):
        """Start Kafka producer"""
        if not settings.KAFKA_ENABLED:
            logger.info("Kafka is disabled")
            return

        try:
            self.producer = AIOKafkaProducer(
                bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
                value_serializer=lambda v: json.dumps(v).encode("utf-8"),
                key_serializer=lambda v: str(v).encode("utf-8") if v else None,
            )
            await self.producer.start()
            logger.info("Kafka producer started successfully")
        except Exception as e:
            logger.warning(f"Failed to start Kafka producer: {e}. Continuing without Kafka.")
            self.producer = None

    async def stop(self):
        """Stop Kafka producer"""
        if self.producer:
            await self.producer.stop()
            self.producer = None
            logger.info("Kafka producer stopped")

    async def publish_event(self, topic: str, key: str, event_data: Dict[str, Any]):
        """
        Publish event to Kafka topic

        Args:
            topic: Kafka topic name
            key: Message key (usually the acting user id)
            event_data: Event data to publish
        """
        if not self.producer:
            logger.debug(f"Kafka disabled, skipping event: {topic}")
            return

        try:
            await self.producer.send(topic, value=event_data, key=key)
            logger.info(f"Published event to {topic}: {key}")
        except Exception as e:
            logger.error(f"Error publishing event to {topic}: {e}")

    async def publish_post_created(
        self, post_id: int, author_id: int, group_id: Optional[int], is_public: bool
    ):
        """Publish post created event"""
        event_data = {
            "event_type": "post_created",
            "post_id": post_id,
            "author_id": author_id,
            "group_id": group_id,
            "is_public": is_public,
            "timestamp": datetime.utcnow().isoformat(),
        }
        await self.publish_event(settings.KAFKA_TOPIC_POST_CREATED, str(author_id), event_data)

    async def publish_follow_event(self, follower_id: int, target_id: int, follow_type: str):
        """Publish follow event"""
        event_data = {
            "event_type": "follow",
            "follower_id": follower_id,
            "target_id": target_id,
            "type": follow_type,
            "timestamp": datetime.utcnow().isoformat(),
        }
        await self.publish_event(settings.KAFKA_TOPIC_FOLLOW, str(follower_id), event_data)

    async def publish_join_requested(self, group_id: int, user_id: int):
        """Publish group join request event"""
        event_data = {
            "event_type": "join_requested",
            "group_id": group_id,
            "user_id": user_id,
            "status": "pending",
            "timestamp": datetime.utcnow().isoformat(),
        }
        await self.publish_event(settings.KAFKA_TOPIC_JOIN_REQUESTED, str(user_id), event_data)

    async def publish_message_sent(self, message_id: int, sender_id: int, receiver_id: int):
        """Publish direct message event"""
        event_data = {
            "event_type": "message_sent",
            "message_id": message_id,
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "timestamp": datetime.utcnow().isoformat(),
        }
        await self.publish_event(settings.KAFKA_TOPIC_MESSAGE_SENT, str(sender_id), event_data)


# Global producer instance
kafka_producer = KafkaProducerManager()


async def get_kafka_producer() -> KafkaProducerManager:
    """Dependency for getting Kafka producer instance"""
    return kafka_producer
