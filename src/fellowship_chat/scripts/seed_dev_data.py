"""Seed development data: one user, one admin and a short conversation."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from fellowship_chat.domain.entities.chat_message import ChatMessage
from fellowship_chat.domain.value_objects.enums import Role
from fellowship_chat.infrastructure.db.models import UserModel
from fellowship_chat.infrastructure.db.session import AsyncSessionLocal
from fellowship_chat.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        now = datetime.now(timezone.utc)

        user = UserModel(id=uuid.uuid4(), name="Frodo", email="frodo@shire.example", role=Role.USER.value)
        admin = UserModel(id=uuid.uuid4(), name="Gandalf", email="gandalf@istari.example", role=Role.ADMIN.value)
        session.add_all([user, admin])
        await uow.flush()

        messages_data = [
            (user.id, Role.USER, "Gandalf, the ring has grown heavy since we left Rivendell."),
            (admin.id, Role.ADMIN, "Keep it hidden, Frodo. I will meet you at Bree."),
            (user.id, Role.USER, "We leave the Shire tonight."),
        ]
        for offset, (sender_id, sender_role, text) in enumerate(messages_data):
            created_at = now + timedelta(seconds=offset)
            await uow.messages_w.create(
                ChatMessage(
                    id=uuid.uuid4(),
                    user_id=user.id,
                    admin_id=admin.id,
                    message=text,
                    sender_id=sender_id,
                    sender_role=sender_role,
                    is_read=False,
                    read_at=None,
                    attachment=None,
                    attachment_type=None,
                    deleted_at=None,
                    created_at=created_at,
                    updated_at=created_at,
                )
            )

        await uow.commit()
        logger.info(
            "Seeded user %s and admin %s with %d messages",
            user.id, admin.id, len(messages_data),
        )


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
