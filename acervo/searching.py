"""Sequential and binary search over record files, with search logs."""

from __future__ import annotations

import sys
import time

from .entities import Book, Client, Loan, RecordFile

DEFAULT_LOG_PATH = "logs/logs_busca.txt"

_LABELS = {Client: "CLIENTE", Book: "LIVRO", Loan: "EMPRESTIMO"}


def log_search(log_path, description: str, comparisons: int, seconds: float) -> None:
    """Append one search entry to the log; a log that cannot be opened is reported and skipped."""
    if log_path is None:
        return
    entry = (
        "*****************************************\n"
        f"{description}: \n"
        f"Numero de comparacoes: {comparisons}\n"
        f" Tempo de execucao: {seconds:.2f} segundos\n\n"
    )
    try:
        with open(log_path, "a", encoding="utf-8") as log:
            log.write(entry)
    except OSError:
        print("Erro ao abrir o ficheiro de logs.", file=sys.stderr)


def _label(records: RecordFile) -> str:
    return _LABELS[records.record_type]


def sequential_search(records: RecordFile, key: int, log_path=DEFAULT_LOG_PATH):
    """Scan the file from the start; return the record with ``key`` or None."""
    started = time.process_time()
    comparisons = 0
    found = None
    for record in records:
        comparisons += 1
        if record.id == key:
            found = record
            break
    elapsed = time.process_time() - started
    log_search(log_path, f"Busca sequencial - {_label(records)}", comparisons, elapsed)
    return found


def binary_search(records: RecordFile, key: int, log_path=DEFAULT_LOG_PATH):
    """Binary search on a file sorted by id; return the record with ``key`` or None."""
    started = time.process_time()
    comparisons = 0
    found = None
    start, end = 0, len(records) - 1
    while start <= end:
        middle = start + (end - start) // 2
        record = records.read_at(middle)
        if record.id == key:
            found = record
            break
        if record.id < key:
            start = middle + 1
        else:
            end = middle - 1
        comparisons += 1
    elapsed = time.process_time() - started
    log_search(log_path, f"Busca binaria - {_label(records)}", comparisons, elapsed)
    return found