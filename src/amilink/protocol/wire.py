"""Multipart framing for amilink records.

Every record is exactly one multipart message, so the transport delimits
records and no end-of-record heuristic is needed.

    Message (sender -> receiver)
        version, id, MSG, payload_json

    Acknowledgment (receiver -> sender)
        version, id, ACK, (empty)

    Rejection (receiver -> sender)
        version, id, ERR, error_text

Routing prefixes added by the receiving socket are not part of the record;
the transport strips them before calling :func:`unpack`.
"""

from __future__ import annotations

import itertools
import threading
from typing import Optional, Sequence, Tuple

from .. import json
from .fields import ACK, ERR, MSG, TYPES, VERSION
from .message import Message, ProtocolError


Frames = Tuple[bytes, ...]

_id_min = 0
_id_max = 0xFFFFFFFF
_id_lock = threading.Lock()
_id_ticker = itertools.count(_id_min)


def next_id() -> bytes:
    """Return the next locally unique record identifier."""

    global _id_ticker

    with _id_lock:
        msg_id = next(_id_ticker)

        if msg_id >= _id_max:
            _id_ticker = itertools.count(_id_min)

    return b"%08x" % msg_id


def pack(message: Message, msg_id: Optional[bytes] = None) -> Frames:
    """Encode a Message as the frames of a MSG record."""

    if msg_id is None:
        msg_id = next_id()

    return (VERSION, msg_id, MSG, message.encapsulate())


def ack(msg_id: bytes) -> Frames:
    return (VERSION, msg_id, ACK, b"")


def error(msg_id: bytes, text: str) -> Frames:
    return (VERSION, msg_id, ERR, text.encode("utf-8", "replace"))


def split(parts: Sequence[bytes]) -> Tuple[bytes, bytes, bytes]:
    """Validate the record header; return (id, type, body)."""

    if len(parts) != 4:
        raise ProtocolError(f"expected 4 frames, received {len(parts)}")

    their_version, msg_id, msg_type, body = parts

    if their_version != VERSION:
        raise ProtocolError(
            f"record is amilink protocol {their_version!r}, recipient expects {VERSION!r}"
        )

    if msg_type not in TYPES:
        raise ProtocolError(f"unknown record type {msg_type!r}")

    return msg_id, msg_type, body


def unpack(parts: Sequence[bytes]) -> Tuple[bytes, Message]:
    """Decode the frames of a MSG record; return (id, Message)."""

    msg_id, msg_type, body = split(parts)

    if msg_type != MSG:
        raise ProtocolError(f"expected a {MSG!r} record, received {msg_type!r}")

    if body == b"":
        raise ProtocolError("empty message payload")

    try:
        payload = json.loads(body)
    except (json.DecodeError, ValueError) as exc:
        raise ProtocolError(f"message payload is not valid JSON: {exc}") from exc

    return msg_id, Message.from_dict(payload)


def header_id(parts: Sequence[bytes]) -> bytes:
    """Best-effort extraction of the record id, for replying to a record
    that could not be unpacked."""

    if len(parts) >= 2:
        return parts[1]
    return b""
