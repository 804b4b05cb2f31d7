"""Byte caps on streamed bodies."""

from collections.abc import AsyncIterable, AsyncIterator, Callable, Mapping

from core.exceptions import GatewayError, MalformedInput


def declared_length(headers: Mapping[str, str]) -> int | None:
    """Return the declared Content-Length, or None when absent."""
    value = headers.get("content-length")
    if value is None or value == "":
        return None
    try:
        length = int(value)
    except ValueError:
        raise MalformedInput("Invalid Content-Length header") from None
    if length < 0:
        raise MalformedInput("Invalid Content-Length header")
    return length


async def capped(
    chunks: AsyncIterable[bytes],
    limit: int,
    on_overflow: Callable[[], GatewayError],
) -> AsyncIterator[bytes]:
    """Yield ``chunks`` unchanged, raising once more than ``limit`` bytes pass."""
    received = 0
    async for chunk in chunks:
        received += len(chunk)
        if received > limit:
            raise on_overflow()
        yield chunk
