"""
Murmur Backend — Notification Service Unit Tests
==================================================

What we test:
    ✅ Listing is newest first, carries the sender, and changes nothing
    ✅ Mark-read flips only the caller's unread notifications and counts them
    ✅ Delete removes only notifications addressed to the caller
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from murmur.models.notification import Notification, NotificationType
from murmur.services.notification_service import NotificationService


async def _notify(db, sender, recipient, kind=NotificationType.LIKE, read=False, age_minutes=0):
    notification = Notification(
        from_user_id=sender.id,
        to_user_id=recipient.id,
        type=kind.value,
        read=read,
        created_at=datetime.now(timezone.utc) - timedelta(minutes=age_minutes),
    )
    db.add(notification)
    await db.flush()
    return notification


class TestNotificationService:

    def setup_method(self):
        self.service = NotificationService()

    @pytest.mark.asyncio
    async def test_list_newest_first_with_sender(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        await _notify(db_session, bob, alice, NotificationType.FOLLOW, age_minutes=10)
        await _notify(db_session, bob, alice, NotificationType.LIKE, age_minutes=1)

        notifications = await self.service.get_notifications(db_session, alice)

        assert [n.type for n in notifications] == ["like", "follow"]
        assert notifications[0].from_user.username == "bob"
        assert notifications[0].from_user.email == "bob@example.com"

    @pytest.mark.asyncio
    async def test_list_has_no_side_effect(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        await _notify(db_session, bob, alice)

        await self.service.get_notifications(db_session, alice)
        again = await self.service.get_notifications(db_session, alice)

        assert [n.read for n in again] == [False]

    @pytest.mark.asyncio
    async def test_list_only_shows_own(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        await _notify(db_session, alice, bob)

        assert await self.service.get_notifications(db_session, alice) == []

    @pytest.mark.asyncio
    async def test_mark_all_read(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        await _notify(db_session, bob, alice)
        await _notify(db_session, bob, alice)
        await _notify(db_session, bob, alice, read=True)
        bobs = await _notify(db_session, alice, bob)

        result = await self.service.mark_all_read(db_session, alice)

        assert result.count == 2
        listed = await self.service.get_notifications(db_session, alice)
        assert all(n.read for n in listed)
        assert bobs.read is False

    @pytest.mark.asyncio
    async def test_delete_scoped_to_recipient(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        await _notify(db_session, bob, alice)
        await _notify(db_session, bob, alice, NotificationType.FOLLOW)
        sent_by_alice = await _notify(db_session, alice, bob)

        result = await self.service.delete_notifications(db_session, alice)

        assert result.count == 2
        remaining = (await db_session.execute(select(Notification))).scalars().all()
        assert [n.id for n in remaining] == [sent_by_alice.id]
        total = (await db_session.execute(select(func.count()).select_from(Notification))).scalar_one()
        assert total == 1
