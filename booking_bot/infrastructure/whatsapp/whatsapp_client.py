from __future__ import annotations

import logging
from typing import Any

import httpx


class WhatsAppClient:
    """Thin Graph API client: posts message payloads for one business phone number."""

    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        api_version: str = "v20.0",
        base_url: str = "https://graph.facebook.com",
        client: httpx.Client | None = None,
    ) -> None:
        self._headers = {"Authorization": f"Bearer {access_token}"}
        self._send_endpoint = f"{base_url.rstrip('/')}/{api_version}/{phone_number_id}/messages"
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send_message(self, recipient_id: str, message: dict[str, Any]) -> None:
        """
        Send one message object (the part after `to`, e.g. {"type": "text", ...}).
        Graph API errors are logged and raised as httpx.HTTPStatusError.
        """
        payload = {"messaging_product": "whatsapp", "recipient_type": "individual", "to": recipient_id}
        payload.update(message)
        resp = self._client.post(self._send_endpoint, headers=self._headers, json=payload)
        if resp.is_success:
            return

        graph_error = _graph_error(resp)
        self._logger.error(
            "WhatsApp send failed",
            extra={
                "user_id": recipient_id,
                "reason": f"status={resp.status_code} type={message.get('type')}",
                "error": f"{graph_error.get('code')}/{graph_error.get('error_subcode')}: {graph_error.get('message')}",
            },
        )
        resp.raise_for_status()


def _graph_error(resp: httpx.Response) -> dict[str, Any]:
    """Graph API errors come as {"error": {"code", "error_subcode", "message"}}."""
    try:
        body = resp.json()
    except ValueError:
        return {"message": resp.text}
    error = body.get("error") if isinstance(body, dict) else None
    return error if isinstance(error, dict) else {"message": resp.text}
