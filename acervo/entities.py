"""Library records (clients, books, loans) and fixed-size binary record files."""

from __future__ import annotations

import random
import struct
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import ClassVar, Generic, Iterator, Protocol, TypeVar

_RULE = "**********************************************"
_ENCODING = "utf-8"


def _encode_text(text: str, width: int, field_name: str) -> bytes:
    raw = text.encode(_ENCODING)
    if len(raw) > width:
        raise ValueError(f"{field_name} is longer than {width} bytes: {text!r}")
    return raw.ljust(width, b"\0")


def _decode_text(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode(_ENCODING, errors="replace")


def _check_size(data: bytes, size: int, kind: str) -> None:
    if len(data) != size:
        raise ValueError(f"{kind} record needs {size} bytes, got {len(data)}")


@dataclass
class Client:
    """A library client; ``next_index`` chains clients sharing a hash slot."""

    id: int
    name: str
    cpf: str
    next_index: int = -1
    occupied: bool = True

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<i50s15sii")
    SIZE: ClassVar[int] = _LAYOUT.size

    def to_bytes(self) -> bytes:
        return self._LAYOUT.pack(
            self.id,
            _encode_text(self.name, 50, "name"),
            _encode_text(self.cpf, 15, "cpf"),
            self.next_index,
            int(self.occupied),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Client":
        _check_size(data, cls.SIZE, "client")
        client_id, name, cpf, next_index, occupied = cls._LAYOUT.unpack(data)
        return cls(client_id, _decode_text(name), _decode_text(cpf), next_index, bool(occupied))


@dataclass
class Book:
    """A book in the collection."""

    id: int
    title: str
    author: str
    genre: str
    year: int
    available: bool = True

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<i50s50s10sic")
    SIZE: ClassVar[int] = _LAYOUT.size

    def to_bytes(self) -> bytes:
        return self._LAYOUT.pack(
            self.id,
            _encode_text(self.title, 50, "title"),
            _encode_text(self.author, 50, "author"),
            _encode_text(self.genre, 10, "genre"),
            self.year,
            b"s" if self.available else b"n",
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Book":
        _check_size(data, cls.SIZE, "book")
        book_id, title, author, genre, year, available = cls._LAYOUT.unpack(data)
        return cls(
            book_id,
            _decode_text(title),
            _decode_text(author),
            _decode_text(genre),
            year,
            available == b"s",
        )


@dataclass
class Loan:
    """A loan of one book to one client."""

    id: int
    book: Book
    client: Client
    loan_date: date
    due_date: date
    value: float = 5.0
    returned: bool = False
    fine: float = 0.0
    late: bool = False

    _HEAD: ClassVar[struct.Struct] = struct.Struct("<i")
    _TAIL: ClassVar[struct.Struct] = struct.Struct("<6idcdc")
    SIZE: ClassVar[int] = _HEAD.size + Book.SIZE + Client.SIZE + _TAIL.size

    def to_bytes(self) -> bytes:
        tail = self._TAIL.pack(
            self.loan_date.year,
            self.loan_date.month,
            self.loan_date.day,
            self.due_date.year,
            self.due_date.month,
            self.due_date.day,
            self.value,
            b"s" if self.returned else b"n",
            self.fine,
            b"s" if self.late else b"n",
        )
        return self._HEAD.pack(self.id) + self.book.to_bytes() + self.client.to_bytes() + tail

    @classmethod
    def from_bytes(cls, data: bytes) -> "Loan":
        _check_size(data, cls.SIZE, "loan")
        (loan_id,) = cls._HEAD.unpack_from(data)
        offset = cls._HEAD.size
        book = Book.from_bytes(data[offset:offset + Book.SIZE])
        offset += Book.SIZE
        client = Client.from_bytes(data[offset:offset + Client.SIZE])
        offset += Client.SIZE
        ly, lm, ld, dy, dm, dd, value, returned, fine, late = cls._TAIL.unpack_from(data, offset)
        return cls(
            loan_id,
            book,
            client,
            date(ly, lm, ld),
            date(dy, dm, dd),
            value,
            returned == b"s",
            fine,
            late == b"s",
        )


class _Record(Protocol):
    id: int
    SIZE: ClassVar[int]

    def to_bytes(self) -> bytes: ...


R = TypeVar("R", Client, Book, Loan)


class RecordFile(Generic[R]):
    """A binary file holding fixed-size records of one type, addressed by index."""

    def __init__(self, path, record_type: type[R]) -> None:
        self.path = Path(path)
        self.record_type = record_type
        self.path.touch(exist_ok=True)
        self._file = open(self.path, "r+b")

    def __len__(self) -> int:
        self._file.seek(0, 2)
        return self._file.tell() // self.record_type.SIZE

    def __iter__(self) -> Iterator[R]:
        index = 0
        while index < len(self):
            yield self.read_at(index)
            index += 1

    def __enter__(self) -> "RecordFile[R]":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def read_at(self, index: int) -> R:
        if not 0 <= index < len(self):
            raise IndexError(f"record index {index} out of range")
        size = self.record_type.SIZE
        self._file.seek(index * size)
        return self.record_type.from_bytes(self._file.read(size))

    def write_at(self, index: int, record: R) -> None:
        if not isinstance(record, self.record_type):
            raise TypeError(f"expected {self.record_type.__name__}, got {type(record).__name__}")
        if not 0 <= index <= len(self):
            raise IndexError(f"record index {index} out of range")
        self._file.seek(index * self.record_type.SIZE)
        self._file.write(record.to_bytes())
        self._file.flush()

    def append(self, record: R) -> int:
        """Write a record at the end and return its index."""
        index = len(self)
        self.write_at(index, record)
        return index

    def position_of(self, record_id: int) -> int:
        for index, record in enumerate(self):
            if record.id == record_id:
                return index
        raise KeyError(record_id)

    def clear(self) -> None:
        self._file.seek(0)
        self._file.truncate()
        self._file.flush()

    def close(self) -> None:
        self._file.close()


def shuffled_ids(size: int, rng: random.Random | None = None) -> list[int]:
    """Return ids 1..size as a cyclic permutation (no id keeps its place)."""
    rng = rng or random.Random()
    ids = list(range(1, size + 1))
    for i in range(size - 1, 0, -1):
        j = rng.randrange(i)
        ids[i], ids[j] = ids[j], ids[i]
    return ids


def save_sorted_status(path, is_sorted: bool) -> None:
    Path(path).write_text(str(int(bool(is_sorted))))


def read_sorted_status(path) -> bool:
    """Whether the databases are sorted; a missing status file means unsorted."""
    try:
        text = Path(path).read_text().strip()
    except FileNotFoundError:
        return False
    try:
        return int(text) != 0
    except ValueError:
        return False


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def format_date(day: date) -> str:
    return f"{day.day:02d}/{day.month:02d}/{day.year:04d}"


def default_client(client_id: int) -> Client:
    return Client(client_id, "ANONIMO", "000.000.000-00", -1, True)


def default_book(book_id: int) -> Book:
    return Book(book_id, "Linguagem C", "Desconhecido", "Cientifico", 1996, True)


def default_loan(loan_id: int, today: date | None = None) -> Loan:
    today = today or date.today()
    return Loan(
        loan_id,
        default_book(1),
        default_client(1),
        today,
        add_days(today, 7),
        5.0,
        False,
        0.0,
        False,
    )


def _ids(size: int, shuffle: bool, rng: random.Random | None) -> list[int]:
    return shuffled_ids(size, rng) if shuffle else list(range(1, size + 1))


def fill_clients(records: RecordFile, size: int, shuffle: bool = False, rng=None) -> None:
    records.clear()
    for client_id in _ids(size, shuffle, rng):
        records.append(default_client(client_id))


def fill_books(records: RecordFile, size: int, shuffle: bool = False, rng=None) -> None:
    records.clear()
    for book_id in _ids(size, shuffle, rng):
        records.append(default_book(book_id))


def fill_loans(records: RecordFile, size: int, shuffle: bool = False, rng=None, today=None) -> None:
    records.clear()
    today = today or date.today()
    for loan_id in _ids(size, shuffle, rng):
        records.append(default_loan(loan_id, today))


def create_databases(clients, books, loans, size, shuffle=False, status_path="status.txt", rng=None) -> None:
    """Refill all three databases with default records and record whether they are sorted."""
    save_sorted_status(status_path, not shuffle)
    fill_clients(clients, size, shuffle, rng)
    fill_books(books, size, shuffle, rng)
    fill_loans(loans, size, shuffle, rng)


def late_days(loan: Loan, today: date | None = None) -> int:
    """Whole days past the due date, or 0 if not overdue."""
    today = today or date.today()
    return max((today - loan.due_date).days, 0)


def format_client(client: Client) -> str:
    return (
        f"{_RULE}\nCliente de codigo {client.id}"
        f"\nNome: {client.name}"
        f"\nCPF: {client.cpf}"
        f"\nProx: {client.next_index}"
        f"\n{_RULE}\n"
    )


def format_book(book: Book) -> str:
    availability = "s" if book.available else "n"
    return (
        f"{_RULE}\nLivro de codigo {book.id}"
        f"\nTitulo: {book.title}"
        f"\nAutor: {book.author}"
        f"\nGenero: {book.genre}"
        f"\nAno de publicacao: {book.year}"
        f"\nDisponibilidade: {availability}"
        f"\n{_RULE}\n"
    )


def format_loan(loan: Loan) -> str:
    lines = [
        f"{_RULE}\nCodigo do Emprestimo: {loan.id}",
        f"Titulo: {loan.book.title}",
        f"Cliente: {loan.client.name}",
        f"Data de emprestimo: {format_date(loan.loan_date)}",
        f"Data de prevista de devolucao: {format_date(loan.due_date)}",
        f"Valor do emprestimo: R${loan.value:.2f}",
        f"Devolvido: {'s' if loan.returned else 'n'}",
    ]
    if loan.fine > 0:
        lines.append(f"Valor da multa: R${loan.fine:.2f}")
    lines.append(f"Devolvido com atraso: {'s' if loan.late else 'n'}")
    lines.append(f"{_RULE}\n")
    return "\n".join(lines)