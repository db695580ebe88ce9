"""
Participant invitation copy

Builds the private selection link and the pre-filled email draft the
organizer sends to each participant.
"""

from typing import Any
from urllib.parse import quote

from .. import config


INVITE_SUBJECT = "Your {event} Link"

INVITE_BODY = (
    "Assalamu Alaikum {first_name},\n\n"
    "Welcome to the {event}!\n\n"
    "Please use the link below to access your unique selection page where you can identify who you are interested in:\n\n"
    "{link}\n\n"
    "Instructions:\n"
    "1. Click the link above\n"
    "2. Select the people you're interested in getting to know\n"
    "3. Rank them in order of preference\n"
    "4. Submit your selections\n\n"
    "The organizers will notify you of any mutual matches.\n\n"
    "JazakAllah Khair,\n"
    "{signature}"
)


def participant_link(token: str) -> str:
    path = config.PARTICIPANT_LINK_PATH
    if not path.startswith("/"):
        path = "/" + path
    if not path.endswith("/"):
        path += "/"
    return f"{config.PUBLIC_BASE_URL}{path}{quote(token, safe='')}"


def invite_message(participant: dict[str, Any], link: str) -> tuple[str, str]:
    subject = INVITE_SUBJECT.format(event=config.EVENT_NAME)
    body = INVITE_BODY.format(
        first_name=participant.get("first_name") or "",
        event=config.EVENT_NAME,
        link=link,
        signature=config.ORGANIZER_SIGNATURE,
    )
    return subject, body


def invite_mailto(participant: dict[str, Any], link: str) -> str | None:
    email = participant.get("email")
    if not email:
        return None
    subject, body = invite_message(participant, link)
    return f"mailto:{quote(email, safe='@')}?subject={quote(subject, safe='')}&body={quote(body, safe='')}"
