"""Contact records and an in-memory contact list."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator
from dataclasses import dataclass

from chatlib.chat_enum import ChatEnum


@dataclass
class Contact:
    """A person, group or channel known to the messenger."""

    contact_id: Hashable | None = None
    alias: str = ""
    avatar: str = ""
    description: str = ""
    extra: str = ""
    creator_id: Hashable | None = None
    type: ChatEnum = ChatEnum.PERSON


def is_valid(contact: Contact) -> bool:
    """Return True if the contact has an identifier."""
    return contact.contact_id is not None


class ContactList:
    """Contacts kept in insertion order, with lookup by identifier."""

    def __init__(self, contacts: Iterable[Contact] = ()) -> None:
        self._data: list[Contact] = []
        self._index: dict[Hashable, int] = {}
        for contact in contacts:
            self.add(contact)

    def add(self, contact: Contact) -> bool:
        """Append a contact; the first contact with a given id wins lookups."""
        self._index.setdefault(contact.contact_id, len(self._data))
        self._data.append(contact)
        return True

    def count(self, chat_type: ChatEnum | None = None) -> int:
        """Number of contacts, optionally only those of the given type."""
        if chat_type is None:
            return len(self._data)
        return sum(1 for c in self._data if c.type == chat_type)

    def get(self, contact_id: Hashable) -> Contact:
        """Contact with the given id, or an invalid empty contact."""
        pos = self._index.get(contact_id)
        return self._data[pos] if pos is not None else Contact()

    def at(self, index: int) -> Contact:
        """Contact at the given position, or an invalid empty contact."""
        if 0 <= index < len(self._data):
            return self._data[index]
        return Contact()

    def for_each(self, f: Callable[[Contact], object]) -> None:
        """Call f for every contact."""
        for contact in self._data:
            f(contact)

    def for_each_until(self, f: Callable[[Contact], bool]) -> None:
        """Call f for each contact until it returns a false value."""
        for contact in self._data:
            if not f(contact):
                break

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Contact]:
        return iter(self._data)