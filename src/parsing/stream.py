"""Server-sent-event decoding for streamed Flowise predictions.

Flowise streams a prediction as `data: ...` lines. Each frame carries either an
incremental text token or an end marker. Tokens are concatenated in arrival
order and the whole text is parsed only once the stream ends; nothing is
parsed incrementally.

Accepted frame shapes:
    data: {"token": "..."}                 token
    data: {"event": "token", "data": "..."} token (Flowise event format)
    data: {"event": "end", ...}            end marker
    data: [DONE]                           end marker
    data: <anything else that is not JSON> raw text
"""

import codecs
import json
from dataclasses import dataclass
from typing import AsyncIterable, Optional, Union

from src.utils.config import config
from src.utils.errors import StreamDecodeError
from src.utils.logger import logger


DONE_SENTINEL = "[DONE]"

# SSE fields that carry no token text
IGNORED_FIELDS = ("event", "id", "retry", "message")


@dataclass(frozen=True)
class StreamFrame:
    """One decoded SSE line: kind is "token", "done", "skip" or "raw"."""

    kind: str
    text: str = ""


SKIP = StreamFrame("skip")
DONE = StreamFrame("done")


def _frame_from_json(obj) -> Optional[StreamFrame]:
    if isinstance(obj, str):
        return StreamFrame("token", obj)
    if not isinstance(obj, dict):
        return None

    if "token" in obj:
        return StreamFrame("token", "" if obj["token"] is None else str(obj["token"]))

    event = obj.get("event")
    if event == "token":
        data = obj.get("data")
        return StreamFrame("token", "" if data is None else str(data))
    if event == "end":
        return DONE
    if event == "error":
        logger.warning(f"Flowise stream reported an error: {obj.get('data')}")
    # start, metadata, sourceDocuments, usedTools, ...
    return SKIP


def decode_sse_line(line: str) -> StreamFrame:
    """Classify a single line of an event stream.

    Args:
        line: One line without its trailing newline.

    Returns:
        StreamFrame describing what the line contributes to the buffer.
    """
    line = line.rstrip("\r")
    if not line.strip() or line.startswith(":"):
        return SKIP

    field, sep, value = line.partition(":")
    if not sep:
        # Some transports emit bare text tokens without the SSE "data:" prefix
        return StreamFrame("raw", line)
    if field in IGNORED_FIELDS:
        return SKIP
    if field != "data":
        return StreamFrame("raw", line)

    if value.startswith(" "):
        value = value[1:]
    if value.strip() == DONE_SENTINEL:
        return DONE

    try:
        obj = json.loads(value)
    except (json.JSONDecodeError, ValueError):
        return StreamFrame("raw", value)

    frame = _frame_from_json(obj)
    return frame if frame is not None else StreamFrame("raw", value)


async def collect_stream_text(
    lines: AsyncIterable[Union[bytes, str]],
    strict_frames: Optional[bool] = None,
) -> str:
    """Consume an event stream and return the concatenated token text.

    Chunks may hold several lines or split a line (or a UTF-8 sequence) anywhere.
    Reading stops at the end marker or when the stream is exhausted.

    Args:
        lines: Async iterable of byte or str chunks (e.g. aiohttp `response.content`).
        strict_frames: Drop undecodable frames instead of appending them as raw text.
            Defaults to STREAM_STRICT_FRAMES.

    Returns:
        All tokens joined in arrival order.
    """
    strict = config.STREAM_STRICT_FRAMES if strict_frames is None else strict_frames
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    parts: list[str] = []
    pending = ""
    dropped = 0

    def _consume(line: str) -> bool:
        nonlocal dropped
        frame = decode_sse_line(line)
        if frame.kind == "done":
            return True
        if frame.kind == "token":
            parts.append(frame.text)
        elif frame.kind == "raw":
            if strict:
                dropped += 1
                logger.debug(f"Dropped frame: {StreamDecodeError(frame.text[:80])}")
            else:
                parts.append(frame.text)
        return False

    finished = False
    async for chunk in lines:
        pending += decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        *complete, pending = pending.split("\n")
        for line in complete:
            if _consume(line):
                finished = True
                break
        if finished:
            break

    if not finished:
        pending += decoder.decode(b"", final=True)
        if pending:
            _consume(pending)

    if dropped:
        logger.warning(f"Dropped {dropped} undecodable stream frames")

    text = "".join(parts)
    logger.debug(f"Collected {len(text)} chars from event stream")
    return text
