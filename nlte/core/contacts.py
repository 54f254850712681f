"""
Contacts

Per-user address book and the recipient resolver built on top of it.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .store import KeyValueStore
from .tokens import is_valid_address

logger = logging.getLogger(__name__)

CONTACTS_NAMESPACE = "contacts"


class ContactError(Exception):
    """Raised when a contact cannot be added or removed."""


class InvalidContactError(ContactError):
    pass


class DuplicateContactError(ContactError):
    pass


@dataclass(frozen=True)
class Contact:
    id: str
    name: str
    address: str
    created_at: int  # ms epoch

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contact":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            address=str(data.get("address") or ""),
            created_at=int(data.get("createdAt") or 0),
        )


class ContactBook:
    """A user's contacts, persisted in the injected store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def list(self, user_key: str) -> List[Contact]:
        raw = self.store.get(user_key, CONTACTS_NAMESPACE, default=[]) or []
        contacts: List[Contact] = []
        for item in raw:
            if isinstance(item, dict) and item.get("name") and item.get("address"):
                contacts.append(Contact.from_dict(item))
        return contacts

    def add(self, user_key: str, name: str, address: str, now_ms: Optional[int] = None) -> Contact:
        name = (name or "").strip()
        address = (address or "").strip()
        if not name:
            raise InvalidContactError("Name is required")
        if not address:
            raise InvalidContactError("Address is required")
        if not is_valid_address(address):
            raise InvalidContactError("Invalid address format")

        contacts = self.list(user_key)
        if any(c.address.lower() == address.lower() for c in contacts):
            raise DuplicateContactError("This address is already in your contacts")

        contact = Contact(
            id=secrets.token_hex(8),
            name=name,
            address=address,
            created_at=now_ms if now_ms is not None else int(time.time() * 1000),
        )
        self._save(user_key, [*contacts, contact])
        logger.info("Added contact %s for %s", name, user_key)
        return contact

    def remove(self, user_key: str, contact_id: str) -> bool:
        contacts = self.list(user_key)
        remaining = [c for c in contacts if c.id != contact_id]
        if len(remaining) == len(contacts):
            return False
        self._save(user_key, remaining)
        return True

    def registry(self, user_key: Optional[str]) -> Dict[str, str]:
        """Lowercased name -> address. Empty when there is no user."""

        if not user_key:
            return {}
        return {c.name.lower().strip(): c.address for c in self.list(user_key)}

    def _save(self, user_key: str, contacts: List[Contact]) -> None:
        self.store.set(user_key, CONTACTS_NAMESPACE, [c.to_dict() for c in contacts])


@dataclass(frozen=True)
class Resolution:
    recipient: str
    name: Optional[str] = None  # set only when a contact matched

    @property
    def resolved(self) -> bool:
        return is_valid_address(self.recipient)


class ContactResolver:
    """Maps a typed recipient to an address using the caller's contacts."""

    def __init__(self, contacts: ContactBook):
        self.contacts = contacts

    def resolve(self, name_or_address: str, user_key: Optional[str] = None) -> Resolution:
        if not name_or_address:
            return Resolution(recipient="")

        # Already an address: never consult the contact store.
        if is_valid_address(name_or_address):
            return Resolution(recipient=name_or_address)

        normalized = name_or_address.lower().strip()
        address = self.contacts.registry(user_key).get(normalized)
        if address:
            logger.debug("Resolved %r to %s", name_or_address, address)
            return Resolution(recipient=address, name=name_or_address)

        logger.info("Could not resolve %r to an address", name_or_address)
        return Resolution(recipient=name_or_address)

    def resolve_recipient(self, name_or_address: str, user_key: Optional[str] = None) -> str:
        return self.resolve(name_or_address, user_key).recipient


__all__ = [
    "CONTACTS_NAMESPACE",
    "Contact",
    "ContactBook",
    "ContactError",
    "ContactResolver",
    "DuplicateContactError",
    "InvalidContactError",
    "Resolution",
]
