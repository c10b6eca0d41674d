from __future__ import annotations

import json
from typing import Any, Dict, Iterator

from gasfinder.domain.events import PushEvent, PushEventName


def _decode_obj(obj: Dict[str, Any]) -> PushEvent:
    """
    Decode a relay message dictionary into a push event.

    Supported shapes
    ----------------
    - ``{"event": "<name>", "data": {...}}``
    - ``{"type": "<name>", "data": {...}}`` (older relays)

    Parameters
    ----------
    obj
        JSON-decoded dictionary that must name the event.

    Returns
    -------
    PushEvent
        Decoded event. The body is passed through unvalidated; each handler
        validates the shape it needs.

    Raises
    ------
    ValueError
        If the event name is missing or unknown.
    """
    name = obj.get("event", obj.get("type"))
    if name is None:
        raise ValueError("Message has no event name")
    try:
        event_name = PushEventName(str(name))
    except ValueError:
        raise ValueError(f"Unknown event: {name}") from None
    return PushEvent(name=event_name, data=obj.get("data"))


def iter_json_objects(text: str) -> Iterator[Dict[str, Any]]:
    """
    Yield one or more JSON objects found in a string.

    This function is robust against inputs where multiple JSON objects are
    accidentally concatenated without delimiters, e.g.::

        '{"a": 1}{"b": 2}'

    Only dictionary objects are yielded (non-dict JSON like lists/strings are ignored).

    Parameters
    ----------
    text
        Input string potentially containing one or more JSON objects.

    Yields
    ------
    dict
        Parsed JSON objects (dictionaries) found in the input.

    Raises
    ------
    json.JSONDecodeError
        If the text is not valid JSON (a subclass of ValueError).
    """
    s = text.strip()
    if not s:
        return

    dec = json.JSONDecoder()
    i = 0
    n = len(s)

    while i < n:
        while i < n and s[i].isspace():
            i += 1
        if i >= n:
            break

        obj, end = dec.raw_decode(s, i)
        if isinstance(obj, dict):
            yield obj
        i = end


def decode_events(line: str) -> Iterator[PushEvent]:
    """
    Decode every event carried by an NDJSON line.

    Unlike a strict NDJSON reader, concatenated objects on one line are all
    delivered, in order, because each may be a separate telemetry envelope.

    Raises
    ------
    ValueError
        If the line is not valid JSON or an object names no known event.
    """
    for obj in iter_json_objects(line):
        yield _decode_obj(obj)


def decode_event(line: str) -> PushEvent:
    """
    Decode the first event of an NDJSON line.

    Raises
    ------
    ValueError
        If no JSON object is found or the event name is unknown.
    """
    for ev in decode_events(line):
        return ev

    raise ValueError("No JSON object found in line")


def encode_event(event: PushEvent) -> str:
    """
    Encode a push event as one NDJSON line (without the newline).
    """
    return json.dumps({"event": event.name.value, "data": event.data}, separators=(",", ":"), default=str)
