"""
Response body normalization
Turns text, binary and streamed response bodies into one HTML document
"""
from collections.abc import AsyncIterable, Iterator
from typing import Union

from starlette.concurrency import iterate_in_threadpool

from .transform import inline_import_maps

Chunk = Union[str, bytes]
HtmlBody = Union[str, bytes, bytearray, memoryview, AsyncIterable[Chunk], Iterator[Chunk]]


class UnsupportedBodyError(TypeError):
    """Response body is neither text, a binary buffer nor a stream"""

    def __init__(self, body: object):
        self.body = body
        super().__init__(f"Not supported! response body type '{type(body).__name__}'")


def _encode(chunk: Chunk) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


async def _drain(stream: AsyncIterable[Chunk]) -> str:
    """Collect every chunk of a stream, then decode once"""
    buffer = bytearray()
    async for chunk in stream:
        buffer.extend(_encode(chunk))
    return buffer.decode("utf-8")


async def read_body(body: HtmlBody) -> str:
    """
    Normalize a response body to text.

    Text is returned as is, binary buffers are decoded as UTF-8, streams
    (async iterables or sync iterators of str/bytes chunks) are drained fully
    before decoding.

    Raises:
        UnsupportedBodyError: any other representation
    """
    if isinstance(body, str):
        return body
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body).decode("utf-8")
    if isinstance(body, AsyncIterable):
        return await _drain(body)
    if isinstance(body, Iterator):
        return await _drain(iterate_in_threadpool(body))
    raise UnsupportedBodyError(body)


async def inline_import_maps_in_body(served_root: str, document_path: str, body: HtmlBody) -> str:
    """Normalize a response body and inline its external import maps"""
    html = await read_body(body)
    return await inline_import_maps(served_root, document_path, html)
