"""
Admin notifications

Text is drafted by an external generative model. Whatever happens on that
side (missing key, network error, bad JSON, timeout) the composer returns a
notification: real content with sent=True, or a fixed fallback with sent=False.
"""
import os
import json
import asyncio
import inspect
import secrets
from datetime import datetime, timezone
from typing import Callable, Optional, Union
from urllib.parse import quote

import structlog

from schemas import AdminNotification, NotificationContent, Order, Seller

logger = structlog.get_logger(__name__)

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
ADMIN_WHATSAPP = os.getenv("ADMIN_WHATSAPP", "923079490721")
NOTIFICATION_TIMEOUT = float(os.getenv("NOTIFICATION_TIMEOUT", "5"))

OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "whatsapp": {"type": "string", "description": "WhatsApp notification message."},
        "email": {"type": "string", "description": "Email notification template."},
    },
    "required": ["whatsapp", "email"],
}


class ExternalServiceError(Exception):
    """The text generator failed or returned something unusable."""


def gemini_generate(prompt: str, schema: dict) -> dict:
    if not GEMINI_API_KEY:
        raise ExternalServiceError("GEMINI_API_KEY is not set")
    from google import genai
    from google.genai import types

    client = genai.Client(api_key=GEMINI_API_KEY)
    response = client.models.generate_content(
        model=GEMINI_MODEL,
        contents=prompt,
        config=types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
        ),
    )
    if not response.text:
        raise ExternalServiceError("No response text from model")
    return json.loads(response.text.strip())


def build_prompt(kind: str, data: Union[Seller, Order]) -> str:
    if kind == "NEW_SELLER":
        payout = data.payout_info
        return (
            "CRITICAL ADMIN ALERT: A new vendor has registered on PK-MART.\n"
            f"Name: {data.full_name}\n"
            f"Email: {data.email}\n"
            f"Phone: {data.phone_number}\n"
            f"Shop: {data.shop_slug}\n"
            f"Payout: {payout.method + ' - ' + payout.account_number if payout else 'not provided'}\n"
            "Draft a WhatsApp message and a formal Email for the Admin to review this vendor."
        )
    return (
        "URGENT ORDER ALERT: A customer placed an order.\n"
        f"Order ID: {data.id}\n"
        f"Shop: {data.shop_name or 'Partner Shop'}\n"
        f"Customer: {data.customer_name} ({data.customer_phone})\n"
        f"Address: {data.customer_address}\n"
        f"Amount: Rs. {data.total_amount}\n"
        "Draft a WhatsApp message and an Email for the Admin to initiate logistics."
    )


def fallback_content(kind: str, record_id: str) -> NotificationContent:
    title = "New Vendor" if kind == "NEW_SELLER" else "New Order"
    return NotificationContent(
        whatsapp=f"ADMIN ALERT: {title} registered. ID: {record_id}. Please check your dashboard for details.",
        email=f"System alert for {kind}. Check Master Logs.",
    )


async def call_generator(generator: Callable, prompt: str, timeout: float) -> dict:
    if inspect.iscoroutinefunction(generator):
        result = await asyncio.wait_for(generator(prompt, OUTPUT_SCHEMA), timeout)
    else:
        result = await asyncio.wait_for(asyncio.to_thread(generator, prompt, OUTPUT_SCHEMA), timeout)
    if not isinstance(result, dict):
        raise ExternalServiceError(f"Expected an object, got {type(result).__name__}")
    return result


async def generate_admin_notification(
    kind: str,
    data: Union[Seller, Order],
    generator: Optional[Callable] = None,
    timeout: Optional[float] = None,
) -> AdminNotification:
    generator = generator or gemini_generate
    timeout = NOTIFICATION_TIMEOUT if timeout is None else timeout
    try:
        content = await call_generator(generator, build_prompt(kind, data), timeout)
        return AdminNotification(
            id=secrets.token_hex(5),
            type=kind,
            timestamp=datetime.now(timezone.utc).isoformat(),
            content=NotificationContent(
                whatsapp=content.get("whatsapp") or "New platform activity detected.",
                email=content.get("email") or "Platform event logged. Check Admin Dashboard.",
            ),
            sent=True,
        )
    except Exception as e:
        logger.warning("notification_fallback", type=kind, record_id=data.id, error=str(e)[:200])
        now = datetime.now(timezone.utc)
        return AdminNotification(
            id=f"f-{int(now.timestamp() * 1000)}",
            type=kind,
            timestamp=now.isoformat(),
            content=fallback_content(kind, data.id),
            sent=False,
        )


def whatsapp_link(text: str, number: str = ADMIN_WHATSAPP) -> str:
    return f"https://wa.me/{number}?text={quote(text)}"
