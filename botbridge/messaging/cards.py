"""Rich card synthesis -- Adaptive Cards and image attachments for replies.

:func:`synthesize` decides whether an outbound text reply is better
delivered as a card.  Rules are checked in order and the first match
replaces the text with attachments.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from botbuilder.schema import Attachment

from ..state.authorized_users import AuthorizedUserStore

logger = logging.getLogger(__name__)

ADAPTIVE_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"

LIST_ADMINS = "list admins"
EASTER_EGG = "easter-egg"
EASTER_EGG_IMAGE_URL = "https://adaptivecards.io/content/cats/1.png"

# First whitespace-delimited token only; an optional query string may follow.
IMAGE_URL = re.compile(
    r"^(https?://\S+/([^/\s?#]+)\.(jpe?g|png|gif))(?:[?#]\S*)?(?=\s|$)",
    re.IGNORECASE,
)

TRIGGER_WORD = "hubot"


@dataclass
class CardResult:
    text: str | None = None
    attachments: list[Attachment] = field(default_factory=list)


# -- attachment builders ---------------------------------------------------


def _adaptive_card_attachment(card_json: dict) -> Attachment:
    card_json.setdefault("type", "AdaptiveCard")
    card_json.setdefault("version", "1.2")
    card_json.setdefault("$schema", "http://adaptivecards.io/schemas/adaptive-card.json")
    return Attachment(content_type=ADAPTIVE_CARD_CONTENT_TYPE, content=card_json)


def _image_attachment(match: re.Match) -> Attachment:
    url, name, ext = match.group(1), match.group(2), match.group(3).lower()
    subtype = "jpeg" if ext in ("jpg", "jpeg") else ext
    return Attachment(content_type=f"image/{subtype}", content_url=url, name=f"{name}.{ext}")


def escape_lt(text: str) -> str:
    return text.replace("<", "&lt;")


def submit_action(title: str, prefix: str, queries: list[str]) -> dict:
    """Build an ``Action.Submit`` whose data re-enters as a command.

    The submission carries ``queryPrefix`` plus ``"<prefix> - query{i}"``
    fragments.  Inputs on the card named ``"<prefix> - input{i}"`` are
    merged into the same payload by the client and are interleaved after
    the matching query when the submission is translated back to text.
    """
    data: dict[str, str] = {"queryPrefix": prefix}
    for i, query in enumerate(queries):
        data[f"{prefix} - query{i}"] = query
    return {"type": "Action.Submit", "title": title, "data": data}


def list_admins_card(admins: list[str]) -> Attachment:
    return _adaptive_card_attachment({
        "body": [
            {"type": "TextBlock", "text": "Admins", "weight": "bolder", "size": "medium"},
            {"type": "TextBlock", "text": escape_lt("\n".join(admins)), "wrap": True},
        ],
    })


def easter_egg_card() -> Attachment:
    return _adaptive_card_attachment({
        "body": [{"type": "Image", "url": EASTER_EGG_IMAGE_URL, "size": "stretch"}],
        "actions": [submit_action("Again!", TRIGGER_WORD, [f"{TRIGGER_WORD} {EASTER_EGG}"])],
    })


# -- template catalog ------------------------------------------------------


CardBuilder = Callable[[re.Match], dict]


@dataclass(frozen=True)
class CardTemplate:
    pattern: re.Pattern
    build: CardBuilder


class CardTemplateCatalog:
    """Ordered regex -> card-builder table matched against inbound queries."""

    def __init__(self) -> None:
        self._templates: list[CardTemplate] = []

    def register(self, pattern: str | re.Pattern, build: CardBuilder) -> None:
        compiled = re.compile(pattern, re.IGNORECASE) if isinstance(pattern, str) else pattern
        self._templates.append(CardTemplate(compiled, build))

    def match(self, inbound_text: str) -> Attachment | None:
        for template in self._templates:
            m = template.pattern.search(inbound_text)
            if m:
                return _adaptive_card_attachment(template.build(m))
        return None


# -- synthesis -------------------------------------------------------------


def synthesize(
    outbound_text: str,
    inbound_text: str,
    authorized_users: AuthorizedUserStore,
    catalog: CardTemplateCatalog | None = None,
) -> CardResult:
    if catalog is not None and inbound_text:
        card = catalog.match(inbound_text)
        if card is not None:
            logger.debug("Card template matched inbound query %r", inbound_text)
            return CardResult(attachments=[card])

    if outbound_text == LIST_ADMINS:
        return CardResult(attachments=[list_admins_card(authorized_users.admins())])

    if outbound_text == EASTER_EGG:
        return CardResult(attachments=[easter_egg_card()])

    image = IMAGE_URL.match(outbound_text)
    if image:
        return CardResult(attachments=[_image_attachment(image)])

    return CardResult(text=outbound_text)
