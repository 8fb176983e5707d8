"""
Murmur Backend — Notification Schemas
"""

import uuid
from datetime import datetime

from murmur.schemas.common import CamelModel
from murmur.schemas.user import UserSummary


class NotificationResponse(CamelModel):
    id: uuid.UUID
    type: str
    read: bool
    to_user_id: uuid.UUID
    from_user_id: uuid.UUID
    created_at: datetime
    from_user: UserSummary
