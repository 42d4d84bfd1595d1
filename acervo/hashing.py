"""Hash index over the client file: a table of slot heads with chains kept in the records."""

from __future__ import annotations

import struct
from collections import deque
from dataclasses import replace
from pathlib import Path

from .entities import Client, RecordFile

TABLE_SIZE = 100
EMPTY = -1

_SLOT = struct.Struct("<i")
_TABLE = struct.Struct(f"<{TABLE_SIZE}i")


class ClientNotFoundError(KeyError):
    """Raised when a client id is not present in the hash index."""


def hash_key(client_id: int) -> int:
    """Slot of a client id: the id modulo the table size."""
    if client_id < 0:
        raise ValueError(f"client id must not be negative, got {client_id}")
    return client_id % TABLE_SIZE


class HashTable:
    """A file of ``TABLE_SIZE`` slot heads indexing a client record file.

    Each slot holds the position of the first client in its chain, or -1.
    Clients sharing a slot are linked through their ``next_index`` field.
    Ids of deleted clients are reused, oldest first, by later insertions.
    """

    def __init__(self, path, clients: RecordFile) -> None:
        self.path = Path(path)
        self.clients = clients
        self._free_ids: deque[int] = deque()
        self._file = open(self.path, "w+b")
        self._reset()

    def _reset(self) -> None:
        self._file.seek(0)
        self._file.truncate()
        self._file.write(_TABLE.pack(*([EMPTY] * TABLE_SIZE)))
        self._file.flush()

    def _slot(self, index: int) -> int:
        self._file.seek(index * _SLOT.size)
        (position,) = _SLOT.unpack(self._file.read(_SLOT.size))
        return position

    def _set_slot(self, index: int, position: int) -> None:
        self._file.seek(index * _SLOT.size)
        self._file.write(_SLOT.pack(position))
        self._file.flush()

    def _set_next(self, position: int, next_index: int) -> None:
        client = self.clients.read_at(position)
        client.next_index = next_index
        self.clients.write_at(position, client)

    def _last_in_chain(self, head: int) -> int:
        position = head
        client = self.clients.read_at(position)
        while client.next_index != EMPTY:
            position = client.next_index
            client = self.clients.read_at(position)
        return position

    def _link(self, position: int, client_id: int) -> None:
        slot = hash_key(client_id)
        head = self._slot(slot)
        if head == EMPTY:
            self._set_slot(slot, position)
        else:
            self._set_next(self._last_in_chain(head), position)

    def build(self) -> None:
        """Index every record of the client file, in file order."""
        self._reset()
        self._free_ids.clear()
        for position in range(len(self.clients)):
            client = self.clients.read_at(position)
            client.next_index = EMPTY
            self.clients.write_at(position, client)
            self._link(position, client.id)

    def slots(self) -> list[int]:
        self._file.seek(0)
        return list(_TABLE.unpack(self._file.read(_TABLE.size)))

    def insert(self, client: Client) -> Client:
        """Store a client under a reused or new id, index it, and return the stored record."""
        if self._free_ids:
            client_id = self._free_ids.popleft()
            stored = replace(client, id=client_id, next_index=EMPTY, occupied=True)
            position = self.clients.position_of(client_id)
            self.clients.write_at(position, stored)
        else:
            stored = replace(client, id=len(self.clients) + 1, next_index=EMPTY, occupied=True)
            position = self.clients.append(stored)
        self._link(position, stored.id)
        return stored

    def search(self, client_id: int) -> Client | None:
        """Return the indexed client with this id, or None."""
        position = self._slot(hash_key(client_id))
        if position == EMPTY:
            return None
        client = self.clients.read_at(position)
        while client.id != client_id and client.next_index != EMPTY:
            client = self.clients.read_at(client.next_index)
        if client.id == client_id and client.occupied:
            return client
        return None

    def delete(self, client_id: int) -> None:
        """Unlink a client, mark its record free, and queue its id for reuse."""
        slot = hash_key(client_id)
        head = self._slot(slot)
        if head == EMPTY:
            raise ClientNotFoundError(client_id)

        previous = EMPTY
        current = head
        client = self.clients.read_at(current)
        while client.next_index != EMPTY and client.id != client_id:
            previous = current
            current = client.next_index
            client = self.clients.read_at(current)

        if client.id != client_id or not client.occupied:
            raise ClientNotFoundError(client_id)

        if previous == EMPTY:
            self._set_slot(slot, client.next_index)
        else:
            self._set_next(previous, client.next_index)

        client.occupied = False
        client.next_index = EMPTY
        self.clients.write_at(current, client)
        self._free_ids.append(client_id)

    def chains(self) -> list[list[int]]:
        """Client ids of each slot's chain, in chain order."""
        result = []
        for head in self.slots():
            ids = []
            position = head
            while position != EMPTY:
                client = self.clients.read_at(position)
                ids.append(client.id)
                position = client.next_index
            result.append(ids)
        return result

    def format_table(self) -> str:
        rows = "".join(f" {index}:\t{position}\n" for index, position in enumerate(self.slots()))
        return "Indice \tPosicao\n" + rows

    def format_chains(self) -> str:
        parts = []
        for index, chain in enumerate(self.chains()):
            if not chain:
                parts.append(f"\n[{index}]: VAZIO")
                continue
            first, *rest = chain
            parts.append(f"\n[{index}]: {first} " + "".join(f"-> {client_id}" for client_id in rest))
        return "".join(parts)

    def close(self) -> None:
        self._file.close()