"""Caller-level exceptions shared by every module.

Raised by the Service Layer; views translate them into 401 / 403.
"""

from __future__ import annotations


class Unauthenticated(Exception):
    """No resolvable principal was supplied."""


class Forbidden(Exception):
    """The principal lacks permission for the requested operation."""
