"""
Notification worker.

Consumes ``event.*`` messages from the events exchange and runs the email
fan-out for each newly created event. Runs embedded in the API process
(``RUN_EMBEDDED_WORKER``) or standalone::

    python -m campus_connect.events.consumer
"""
import asyncio, json
import uuid
from typing import Optional
from aio_pika import connect_robust, ExchangeType
from campus_connect.core.config import settings
from campus_connect.core.logging import logger
from campus_connect.db.session import AsyncSessionLocal
from campus_connect.db.repositories import get_event_row, list_students
from campus_connect.events.publisher import EXCHANGE_NAME
from campus_connect.notifications.fanout import notify_new_event, NotificationReport, Sender

QUEUE_NAME = "campusconnect.notifications"

async def handle_message(
    body: bytes,
    session_factory=AsyncSessionLocal,
    sender: Optional[Sender] = None,
) -> Optional[NotificationReport]:
    data = json.loads(body.decode())
    typ = data.get("type")
    if typ == "event.created":
        event_id = uuid.UUID(data["event_id"])
        async with session_factory() as session:
            ev = await get_event_row(session, event_id)
            if not ev:
                logger.warning(f"Event {event_id} not found; skipping notifications")
                return None
            students = await list_students(session)
        return await notify_new_event(ev, students, sender=sender)
    logger.debug(f"Ignoring message of type {typ}")
    return None

async def run_worker():
    max_retries = 10
    delay = 5  # seconds
    for attempt in range(1, max_retries + 1):
        try:
            connection = await connect_robust(settings.RABBITMQ_URL)
            logger.info("Successfully connected to RabbitMQ")
            break
        except Exception as e:
            logger.error(f"RabbitMQ connection failed (attempt {attempt}/{max_retries}): {e}")
            if attempt == max_retries:
                raise
            await asyncio.sleep(delay)
    async with connection:
        channel = await connection.channel()
        await channel.set_qos(prefetch_count=10)
        exchange = await channel.declare_exchange(EXCHANGE_NAME, ExchangeType.TOPIC, durable=True)
        queue = await channel.declare_queue(QUEUE_NAME, durable=True)
        await queue.bind(exchange, routing_key="event.*")
        async with queue.iterator() as queue_iter:
            async for message in queue_iter:
                async with message.process():
                    try:
                        await handle_message(message.body)
                    except Exception as e:
                        logger.exception(f"Error handling message: {e}")

if __name__ == "__main__":
    asyncio.run(run_worker())
