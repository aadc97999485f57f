#!/usr/bin/python
#
# Python pciids library
# Exception types
#
# (c) 2025 Steven Noonan
# Licensed under the MIT license
#

from typing import Optional


class PciIdsError(Exception):
    """Base class for errors raised by pciids."""


class MalformedDatabase(PciIdsError, ValueError):
    """
    A child record appeared without a matching open parent (e.g. a device
    line before any vendor line). The build is aborted; no table is published.
    """

    def __init__(
        self, message: str, lineno: Optional[int] = None, line: Optional[str] = None
    ):
        self.lineno = lineno
        self.line = line
        if lineno is not None:
            message = f"line {lineno}: {message}"
        if line is not None:
            message = f"{message}: {line!r}"
        super().__init__(message)


class IntegrityError(PciIdsError, AssertionError):
    """A back-reference did not resolve. Indicates a defect in the table build."""
