"""
Domain errors raised by the services and translated to HTTP responses by the routes.
"""

from __future__ import annotations


class ContactHubError(Exception):
    """Base class for expected failures."""


class EmailAlreadyRegistered(ContactHubError):
    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


class InvalidCredentials(ContactHubError):
    pass


class InvalidToken(ContactHubError):
    pass


class ContactNotFound(ContactHubError):
    def __init__(self, contact_id: str):
        super().__init__(f"Contact not found: {contact_id}")
        self.contact_id = contact_id
