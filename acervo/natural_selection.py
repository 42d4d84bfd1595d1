"""Replacement selection with a reservoir: split a record file into sorted partitions."""

from __future__ import annotations

import sys
import time
from itertools import islice
from pathlib import Path

from .entities import Book, Client, Loan, RecordFile
from .merging import partition_path

DEFAULT_LOG_PATH = "logs/logs_classificacao.txt"
RESERVOIR_NAME = "reservatorio.dat"

_LABELS = {Client: "CLIENTE", Book: "LIVRO", Loan: "EMPRESTIMO"}


def log_selection(log_path, description: str, partitions: int, seconds: float) -> None:
    """Append one selection entry to the log; a log that cannot be opened is reported and skipped."""
    if log_path is None:
        return
    entry = (
        "*****************************************\n"
        f"{description}: \n"
        f"Numero de particoes criadas: {partitions}\n"
        f"Tempo de execucao: {seconds:.2f} segundos\n\n"
    )
    try:
        with open(log_path, "a", encoding="utf-8") as log:
            log.write(entry)
    except OSError:
        print("Erro ao abrir o ficheiro de logs.", file=sys.stderr)


def _smallest(slots: list) -> int | None:
    """Index of the record with the smallest id (first on ties), or None if all slots are empty."""
    return min(
        (index for index, record in enumerate(slots) if record is not None),
        key=lambda index: slots[index].id,
        default=None,
    )


def _padded(records: list, size: int) -> list:
    return records + [None] * (size - len(records))


def natural_selection(records: RecordFile, reservoir_size: int, directory,
                      log_path=DEFAULT_LOG_PATH) -> int:
    """Write sorted partitions of ``records`` into ``directory``; return how many were written."""
    if reservoir_size < 1:
        raise ValueError(f"reservoir size must be at least 1, got {reservoir_size}")

    directory = Path(directory)
    record_type = records.record_type
    started = time.process_time()

    total = len(records)
    source = iter(records)
    slots = list(islice(source, reservoir_size))
    placed = len(slots)
    slots = _padded(slots, reservoir_size)
    partitions = 0

    with RecordFile(directory / RESERVOIR_NAME, record_type) as reservoir:
        reservoir.clear()
        while placed < total:
            with RecordFile(partition_path(directory, partitions), record_type) as part:
                part.clear()
                while len(reservoir) < reservoir_size and placed < total:
                    smallest = _smallest(slots)
                    if smallest is None:
                        break
                    written = slots[smallest]
                    part.append(written)
                    incoming = next(source, None)
                    if incoming is None:
                        slots[smallest] = None
                    elif incoming.id < written.id:
                        reservoir.append(incoming)
                        slots[smallest] = None
                    else:
                        slots[smallest] = incoming
                        placed += 1
            partitions += 1

            if len(reservoir) == 0:
                break
            slots = _padded(list(islice(reservoir, reservoir_size)), reservoir_size)
            reservoir.clear()

        remaining = [record for record in slots if record is not None]
        if remaining:
            with RecordFile(partition_path(directory, partitions), record_type) as part:
                part.clear()
                for record in sorted(remaining, key=lambda record: record.id):
                    part.append(record)
            partitions += 1

    elapsed = time.process_time() - started
    log_selection(log_path, f"Seleção natural - {_LABELS[record_type]}", partitions, elapsed)
    return partitions