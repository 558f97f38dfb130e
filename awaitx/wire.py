from __future__ import annotations
import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from .message import Call, Envelope, MsgType

logger = logging.getLogger(__name__)

def decode(event: Any) -> Dict[str, Any]:
    """
    Default extraction of the wire mapping from a channel event, either an
    object with attributes or a plain mapping: ``data`` first, then
    ``detail``. Anything that is not a plain dict decodes to {}.
    """
    if isinstance(event, Mapping):
        found = event.get("data") or event.get("detail") or {}
    else:
        found = getattr(event, "data", None) or getattr(event, "detail", None) or {}
    return found if isinstance(found, dict) else {}

def pack(env: Envelope) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "type": env.type.tag(env.channel_id),
        "from": env.sender,
    }
    if env.type == MsgType.RESPONSE:
        out["responseId"] = env.response_id
        if env.error is not None:
            out["error"] = env.error
        else:
            out["data"] = env.data
        return out

    out["data"] = env.call.to_dict()
    if env.type == MsgType.REQUEST:
        out["requestId"] = env.request_id
    return out

def unpack(raw: Dict[str, Any], channel_id: str = "") -> Optional[Envelope]:
    """
    Return the Envelope carried by a decoded mapping, or None when the
    mapping is malformed or belongs to another sub-channel.
    """
    kinds = {kind.tag(channel_id): kind for kind in MsgType}
    kind = kinds.get(raw.get("type"))
    sender = raw.get("from")
    if kind is None or not isinstance(sender, str) or not sender:
        return None

    if kind == MsgType.RESPONSE:
        response_id = raw.get("responseId")
        if not response_id:
            return None
        return Envelope(type=kind, sender=sender, channel_id=channel_id,
                        data=raw.get("data"), response_id=response_id,
                        error=raw.get("error"))

    call = _unpack_call(raw.get("data"))
    if call is None:
        logger.debug("malformed %s from %s: %r", kind, sender, raw.get("data"))
        return None

    if kind == MsgType.REQUEST:
        request_id = raw.get("requestId")
        if not request_id:
            return None
        return Envelope(type=kind, sender=sender, channel_id=channel_id,
                        data=call, request_id=request_id)

    return Envelope(type=kind, sender=sender, channel_id=channel_id, data=call)

def _unpack_call(data: Any) -> Optional[Call]:
    if not isinstance(data, dict):
        return None
    name = data.get("name")
    args = data.get("args", [])
    if not isinstance(name, str) or not name or not isinstance(args, (list, tuple)):
        return None
    return Call(name, list(args))
