"""
WhatsApp messaging through the Green API gateway.

API Documentation: https://green-api.com/en/docs/api/
Every method path ends with the instance access token, e.g.
``{base_url}/waInstance{instance_id}/sendMessage/{token}``.
"""
import re
import logging
from typing import Optional
import httpx
from greenwaste.core.config import settings
from greenwaste.core.exceptions import DomainValidationError, UpstreamError

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^(\+972|972|0)?[2-9][0-9]{7,8}$")


def format_phone_number(phone: str, country_code: Optional[str] = None) -> str:
    """
    Convert a local or international phone number to a Green API chat id.

    ``054-1234567`` -> ``972541234567@c.us``
    """
    country_code = country_code or settings.PHONE_COUNTRY_CODE
    cleaned = re.sub(r"\D", "", phone)

    if cleaned.startswith("0"):
        return f"{country_code}{cleaned[1:]}@c.us"
    if not cleaned.startswith(country_code):
        return f"{country_code}{cleaned}@c.us"
    return f"{cleaned}@c.us"


def is_valid_chat_id(chat_id: str) -> bool:
    return chat_id.endswith("@c.us") or chat_id.endswith("@g.us")


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(re.sub(r"\D", "", phone)))


def to_chat_id(destination: str) -> str:
    """Accept either a ready chat id or a phone number."""
    chat_id = destination if "@" in destination else format_phone_number(destination)
    if not is_valid_chat_id(chat_id):
        raise DomainValidationError("מזהה צ'אט לא תקין", field="chat_id")
    return chat_id


class GreenApiClient:
    """Thin synchronous client for the Green API instance endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        instance_id: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.base_url = (base_url if base_url is not None else settings.GREEN_API_BASE_URL).rstrip("/")
        self.instance_id = instance_id if instance_id is not None else settings.GREEN_API_INSTANCE_ID
        self.access_token = access_token if access_token is not None else settings.GREEN_API_ACCESS_TOKEN
        self.timeout = timeout if timeout is not None else settings.GREEN_API_TIMEOUT
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.base_url and self.instance_id and self.access_token)

    def _url(self, method: str) -> str:
        return f"{self.base_url}/waInstance{self.instance_id}/{method}/{self.access_token}"

    def _request(self, http_method: str, method: str, payload: Optional[dict] = None) -> dict:
        if not self.is_configured():
            logger.error("Green API is not configured (instance id, access token and base URL are required)")
            raise UpstreamError("שירות WhatsApp אינו מוגדר")

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(http_method, self._url(method), json=payload)
                response.raise_for_status()
                data = response.json()

            if settings.DEBUG:
                logger.debug(f"Green API {method} response: {data}")
            return data

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error with Green API {method}: {e.response.status_code} - {e.response.text}")
            raise UpstreamError(f"שגיאה בשליחת הודעת WhatsApp (HTTP {e.response.status_code})")
        except httpx.HTTPError as e:
            logger.error(f"Network error with Green API {method}: {e}")
            raise UpstreamError("שגיאת רשת בשליחת הודעת WhatsApp")
        except ValueError as e:
            logger.error(f"Invalid JSON from Green API {method}: {e}")
            raise UpstreamError("תשובה לא תקינה משירות WhatsApp")

    def send_message(self, destination: str, message: str, quoted_msg_id: Optional[str] = None) -> str:
        """Send a text message. Returns the provider message id."""
        payload = {"chatId": to_chat_id(destination), "message": message}
        if quoted_msg_id:
            payload["quotedMsgId"] = quoted_msg_id
        data = self._request("POST", "sendMessage", payload)
        return self._message_id(data)

    def send_file_by_url(
        self,
        destination: str,
        file_url: str,
        file_name: str,
        caption: Optional[str] = None
    ) -> str:
        """Send a file (e.g. the report photo) with an optional caption."""
        payload = {
            "chatId": to_chat_id(destination),
            "urlFile": file_url,
            "fileName": file_name,
        }
        if caption:
            payload["caption"] = caption
        data = self._request("POST", "sendFileByUrl", payload)
        return self._message_id(data)

    def get_state_instance(self) -> str:
        """Connection state of the instance, ``authorized`` when ready."""
        data = self._request("GET", "getStateInstance")
        return data.get("stateInstance", "unknown")

    def is_instance_ready(self) -> bool:
        try:
            return self.get_state_instance() == "authorized"
        except UpstreamError:
            return False

    @staticmethod
    def _message_id(data: dict) -> str:
        message_id = data.get("idMessage")
        if not message_id:
            logger.error(f"Green API response without idMessage: {data}")
            raise UpstreamError("תשובה לא תקינה משירות WhatsApp")
        return message_id
