# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Error taxonomy shared by the parser, codec, reconciler and performers."""

import copy
from typing import Optional


class TEPBotError(Exception):
    """Base class for every error raised by tepbot."""


class FetchError(TEPBotError):
    """A GitHub request failed (network error or unexpected HTTP status)."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ParseError(TEPBotError, ValueError):
    """README rows or proposal file metadata could not be parsed."""


class EncodingMismatch(TEPBotError, ValueError):
    """An issue or comment does not have the structure the codec expects."""


class RunCancelled(TEPBotError):
    """The run was cancelled before the next GitHub request."""


def with_context(err: TEPBotError, context: str) -> TEPBotError:
    """Copy of ``err`` whose message is prefixed with ``context``, keeping its type and attributes."""
    wrapped = copy.copy(err)
    wrapped.args = (f'{context}: {err}',) + tuple(err.args[1:])
    return wrapped
