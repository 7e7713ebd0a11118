"""Service for sending SMS via Twilio."""

from __future__ import annotations

import asyncio
from enum import StrEnum
import logging
import math
from typing import Any, Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from ..core.config import settings

logger = logging.getLogger(__name__)

MAX_SMS_LENGTH = 1600


class SMSStatus(StrEnum):
    SUCCESS = "success"
    DISABLED = "disabled"
    ERROR = "error"


class SMSService:
    """Service for sending SMS via Twilio."""

    def __init__(self, client: Optional[Client] = None) -> None:
        auth_token = (
            settings.twilio_auth_token.get_secret_value() if settings.twilio_auth_token else ""
        )
        self.from_number = settings.twilio_phone_number

        if client is not None:
            self.client: Optional[Client] = client
            self.enabled = True
        else:
            self.enabled = bool(
                settings.sms_enabled
                and settings.twilio_account_sid
                and auth_token
                and settings.twilio_phone_number
            )
            if self.enabled:
                self.client = Client(settings.twilio_account_sid, auth_token)
            else:
                self.client = None
                logger.info("SMS service disabled - Twilio credentials not configured")

    async def send_sms_with_status(
        self, to_number: Optional[str], message: str
    ) -> tuple[Optional[dict[str, Any]], SMSStatus]:
        """
        Send an SMS message.

        Args:
            to_number: Recipient phone number in E.164 format (+919876543210)
            message: Message body (truncated past 1600 chars)
        """
        if not self.enabled:
            logger.debug("SMS disabled, would send to %s", to_number)
            return None, SMSStatus.DISABLED

        if not to_number:
            logger.warning("Cannot send SMS: no phone number provided")
            return None, SMSStatus.ERROR

        if not to_number.startswith("+"):
            logger.warning("Invalid phone number format: %s", to_number)
            return None, SMSStatus.ERROR

        if len(message) > MAX_SMS_LENGTH:
            message = message[: MAX_SMS_LENGTH - 3] + "..."

        segments = self._count_sms_segments(message)
        if segments > 1:
            logger.info(
                "SMS to %s: %s chars, %s segments", to_number[-4:], len(message), segments
            )

        result = await asyncio.to_thread(self._send_sms_sync, to_number, message)
        if result is None:
            return None, SMSStatus.ERROR
        return result, SMSStatus.SUCCESS

    def _send_sms_sync(self, to_number: str, message: str) -> Optional[dict[str, Any]]:
        if not self.client:
            return None

        try:
            twilio_message = self.client.messages.create(
                body=message, from_=self.from_number, to=to_number
            )
            logger.info("SMS sent to %s, SID: %s", to_number, twilio_message.sid)
            return {
                "sid": twilio_message.sid,
                "status": getattr(twilio_message, "status", None),
                "to": to_number,
                "from": self.from_number,
            }
        except TwilioRestException as exc:
            logger.error("Twilio error sending SMS to %s: %s", to_number, exc)
            return None
        except Exception as exc:
            logger.error("Unexpected error sending SMS to %s: %s", to_number, exc)
            return None

    @staticmethod
    def _count_sms_segments(message: str) -> int:
        if not message:
            return 1
        if all(ord(ch) < 128 for ch in message):
            return 1 if len(message) <= 160 else math.ceil(len(message) / 153)
        return 1 if len(message) <= 70 else math.ceil(len(message) / 67)
