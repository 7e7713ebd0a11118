from typing import Optional

from sqlalchemy.orm import Session

from ..models.notification import UserDevice
from ..repositories.factory import RepositoryFactory
from .base import BaseService


class DeviceService(BaseService):
    """Client installs and their last-seen heartbeat."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_device_repository(db)

    @BaseService.measure_operation("register_device")
    def register_device(
        self,
        user_id: str,
        device_id: str,
        device_type: Optional[str] = None,
        platform: Optional[str] = None,
        app_version: Optional[str] = None,
        push_token: Optional[str] = None,
    ) -> UserDevice:
        with self.transaction():
            return self.repository.upsert(
                device_id=device_id,
                user_id=user_id,
                device_type=device_type,
                platform=platform,
                app_version=app_version,
                push_token=push_token,
            )

    @BaseService.measure_operation("heartbeat")
    def heartbeat(self, user_id: str, device_id: str) -> bool:
        with self.transaction():
            return self.repository.touch(user_id, device_id) > 0
