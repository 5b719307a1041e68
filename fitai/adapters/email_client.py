from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import requests

SENDGRID_ENDPOINT = "https://api.sendgrid.com/v3/mail/send"


@dataclass
class EmailClient:
    api_key: str
    sender_email: str

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.sender_email)

    def send(self, recipient: str, subject: str, body: str) -> Dict[str, object]:
        if not self.api_key:
            raise RuntimeError("Email client configured without API key")
        if not self.sender_email:
            raise RuntimeError("Email client configured without sender email")

        payload = {
            "personalizations": [{"to": [{"email": recipient}]}],
            "from": {"email": self.sender_email},
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        response = requests.post(SENDGRID_ENDPOINT, headers=headers, json=payload, timeout=10)
        if response.status_code not in (200, 202):
            raise RuntimeError(
                f"Failed to send email via SendGrid (status {response.status_code}): {response.text}"
            )

        return {
            "status": response.status_code,
            "recipient": recipient,
            "subject": subject,
        }
