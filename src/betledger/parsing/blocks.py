"""Block splitting and ticket header parsing for bet-history pastes."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List

from betledger.parsing.types import RawBlock

logger = logging.getLogger(__name__)

MONTHS = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"
FOOTER_TOKEN = "TOTAL"

BLOCK_BOUNDARY = re.compile(rf"\n(?=(?:{MONTHS})-\d{{2}}-\d{{4}}[ \t]*(?:\n|$))")
DATE_PATTERN = re.compile(rf"((?:{MONTHS})-\d{{2}}-\d{{4}})")
TIME_PATTERN = re.compile(r"^(\d{1,2}:\d{2}\s+(?:AM|PM))")
DATE_TIME_PATTERN = re.compile(rf"((?:{MONTHS}))-(\d{{2}})-(\d{{4}})\s+(\d{{1,2}}):(\d{{2}})\s+(AM|PM)")
TICKET_ID_PATTERN = re.compile(r"(\d{9})")

# Mis-encoded forms show up when the history page is copied through some clipboards.
_FRACTIONS = {
    "Â½": ".5",
    "¬Ω": ".5",
    "½": ".5",
    "Â¼": ".25",
    "¬º": ".25",
    "¼": ".25",
}
_DASHES = {"−": "-", "–": "-", "—": "-"}


def normalize_glyphs(text: str) -> str:
    """Replace half/quarter-point glyphs and unicode dashes with ASCII."""

    for glyph, replacement in {**_DASHES, **_FRACTIONS}.items():
        text = text.replace(glyph, replacement)
    # "+.5" reads as "+0.5" once the glyph is gone
    return re.sub(r"([+-])\.(\d)", r"\g<1>0.\2", text)


def split_blocks(raw_text: str) -> List[RawBlock]:
    """Partition a paste into per-wager blocks.

    Blank blocks and the ``TOTAL`` footer are dropped; indices refer to the
    position in the raw split so errors can be traced back to the paste.
    """

    text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
    blocks: List[RawBlock] = []
    for index, chunk in enumerate(BLOCK_BOUNDARY.split(text)):
        stripped = chunk.strip()
        if not stripped or stripped == FOOTER_TOKEN:
            continue
        blocks.append(RawBlock(index=index, text=chunk))
    logger.debug("Split paste into %d block(s)", len(blocks))
    return blocks


def block_lines(text: str) -> List[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def parse_slip_datetime(value: str) -> datetime | None:
    """Parse ``Mon-DD-YYYY HH:MM AM|PM`` into a naive local datetime."""

    match = DATE_TIME_PATTERN.search(value)
    if not match:
        return None
    month, day, year, hours, minutes, period = match.groups()
    try:
        return datetime.strptime(f"{month}-{day}-{year} {hours}:{minutes} {period}", "%b-%d-%Y %I:%M %p")
    except ValueError:
        return None


@dataclass(frozen=True)
class TicketHeader:
    placed_at: datetime
    ticket_id: str
    type_label: str


def parse_header(text: str) -> TicketHeader | None:
    """Read the date line and the ``time<TAB>ticket<TAB>label`` line of a block."""

    lines = block_lines(text)
    if len(lines) < 2:
        return None
    date_match = DATE_PATTERN.search(lines[0])
    if not date_match:
        return None

    time_str = ""
    id_and_type = ""
    for line in lines[1:6]:
        time_match = TIME_PATTERN.match(line)
        if time_match:
            time_str = time_match.group(1)
            parts = re.split(r"\t+", line)
            if len(parts) >= 2:
                id_and_type = "\t".join(parts[1:])
            else:
                id_and_type = line[time_match.end():].strip()
            break
    if not time_str:
        return None

    placed_at = parse_slip_datetime(f"{date_match.group(1)} {time_str}")
    if placed_at is None:
        return None

    fields = [part.strip() for part in re.split(r"\t+", id_and_type) if part.strip()]
    ticket_id = ""
    type_label = ""
    if fields and fields[0].isdigit():
        ticket_id = fields[0]
        type_label = " ".join(fields[1:])
    else:
        type_label = " ".join(fields)
    if not ticket_id:
        id_match = TICKET_ID_PATTERN.search(text)
        ticket_id = id_match.group(1) if id_match else f"bet-{uuid.uuid4().hex[:12]}"
    return TicketHeader(placed_at=placed_at, ticket_id=ticket_id, type_label=type_label)
