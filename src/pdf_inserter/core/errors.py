# SPDX-License-Identifier: Apache-2.0
"""Insertion error definitions."""

from __future__ import annotations


class InsertError(Exception):
    """Base exception for insertion errors."""

    def __init__(
        self,
        message: str,
        operation: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class ArgumentError(InsertError, ValueError):
    """Invalid caller argument (degenerate rectangle, bad size or color)."""


class EncodingError(InsertError):
    """Malformed text input under strict decoding."""


class FatalError(InsertError):
    """A collaborator (object graph, image decoder, flow renderer) failed.

    The page is left untouched when this error is raised.
    """
