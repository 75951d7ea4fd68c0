"""Domain errors raised by services and mapped to HTTP responses in the app."""

from __future__ import annotations


class NotFoundError(Exception):
    def __init__(self, resource: str, identifier: object):
        super().__init__(f"{resource} not found with identifier: {identifier}")
        self.resource = resource
        self.identifier = identifier
