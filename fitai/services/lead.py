from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Dict, Optional

from fitai.adapters.email_client import EmailClient
from fitai.schemas.lead import LeadFormData

logger = logging.getLogger(__name__)


class LeadService:
    """Stores consultation requests submitted through the lead form."""

    def __init__(
        self,
        collection,
        email_client: Optional[EmailClient] = None,
        trainer_email: str = "",
    ) -> None:
        self._collection = collection
        self._email_client = email_client
        self._trainer_email = trainer_email

    def submit(self, form: LeadFormData, source: str = "lead_form") -> Dict[str, Any]:
        payload = {
            "name": form.name,
            "email": str(form.email),
            "goal": form.goal,
            "experience": form.experience,
            "source": source,
            "lead_status": "NEW",
            "captured_at": datetime.now(UTC).isoformat(),
        }
        result = self._collection.insert_one(payload)
        lead_id = str(result.inserted_id)
        logger.info("Lead %s stored (source=%s)", lead_id, source)
        self._notify_trainer(lead_id, payload)
        return {"id": lead_id, **payload}

    def build_confirmation_message(self, form: LeadFormData) -> str:
        return (
            f"✅ Thank you {form.name}! The trainer will contact you at {form.email} "
            f"within 24 hours to schedule your free {form.goal} consultation!"
        )

    def _notify_trainer(self, lead_id: str, payload: Dict[str, Any]) -> None:
        if not self._trainer_email or self._email_client is None or not self._email_client.configured:
            return
        body = (
            f"New consultation request ({lead_id}).\n\n"
            f"Name: {payload['name']}\n"
            f"Email: {payload['email']}\n"
            f"Goal: {payload['goal']}\n"
            f"Experience: {payload['experience']}\n"
        )
        try:
            self._email_client.send(
                recipient=self._trainer_email,
                subject="New FitAI consultation request",
                body=body,
            )
        except Exception:
            logger.exception("Failed to notify trainer about lead %s", lead_id)
