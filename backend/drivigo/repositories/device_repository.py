# backend/drivigo/repositories/device_repository.py
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.notification import UserDevice
from .base_repository import BaseRepository


class DeviceRepository(BaseRepository[UserDevice]):
    def __init__(self, db: Session):
        super().__init__(db, UserDevice)

    def upsert(
        self,
        *,
        device_id: str,
        user_id: str,
        device_type: Optional[str],
        platform: Optional[str],
        app_version: Optional[str],
        push_token: Optional[str],
    ) -> UserDevice:
        """Register a device; an existing device id is re-assigned to ``user_id``."""
        now = datetime.now(timezone.utc)
        try:
            device = self.find_one_by(device_id=device_id)
            if device is None:
                device = UserDevice(device_id=device_id, last_active=now)
                self.db.add(device)
            device.user_id = user_id
            device.device_type = device_type
            device.platform = platform
            device.app_version = app_version
            device.push_token = push_token
            device.last_active = now
            self.db.flush()
            return device
        except SQLAlchemyError as e:
            self.logger.error("Error registering device %s: %s", device_id, e)
            raise RepositoryException(f"Failed to register device: {e}") from e

    def touch(self, user_id: str, device_id: str) -> int:
        try:
            updated = (
                self.db.query(UserDevice)
                .filter(UserDevice.user_id == user_id, UserDevice.device_id == device_id)
                .update({UserDevice.last_active: datetime.now(timezone.utc)})
            )
            self.db.flush()
            return updated
        except SQLAlchemyError as e:
            self.logger.error("Error updating device heartbeat %s: %s", device_id, e)
            raise RepositoryException(f"Failed to update device: {e}") from e
