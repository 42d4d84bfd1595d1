"""In-place quicksort of record files by id, with sort logs."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass

from .entities import Book, Client, Loan, RecordFile, save_sorted_status

DEFAULT_LOG_PATH = "logs/logs_ordenacao.txt"

_LABELS = {Client: "CLIENTE", Book: "LIVRO", Loan: "EMPRESTIMO"}


@dataclass
class SortStats:
    """Counts gathered while sorting."""

    comparisons: int = 0
    swaps: int = 0


def log_sort(log_path, description: str, stats: SortStats, seconds: float) -> None:
    """Append one sort entry to the log; a log that cannot be opened is reported and skipped."""
    if log_path is None:
        return
    entry = (
        "*****************************************\n"
        f"{description}: \n"
        f"Numero de comparacoes: {stats.comparisons}\n"
        f"Numero de trocas: {stats.swaps}\n"
        f"Tempo de execucao: {seconds:.2f} segundos\n\n"
    )
    try:
        with open(log_path, "a", encoding="utf-8") as log:
            log.write(entry)
    except OSError:
        print("Erro ao abrir o ficheiro de logs.", file=sys.stderr)


def partition(records: RecordFile, start: int, end: int, stats: SortStats) -> int:
    """Partition records[start..end] around the last record; return the pivot's final index."""
    pivot = records.read_at(end)
    i = start - 1
    for j in range(start, end):
        current = records.read_at(j)
        stats.comparisons += 1
        if current.id <= pivot.id:
            i += 1
            other = records.read_at(i)
            records.write_at(i, current)
            records.write_at(j, other)
            stats.swaps += 1
    displaced = records.read_at(i + 1)
    records.write_at(i + 1, pivot)
    records.write_at(end, displaced)
    stats.swaps += 1
    return i + 1


def quick_sort(records: RecordFile, start: int, end: int, stats: SortStats | None = None) -> SortStats:
    """Sort records[start..end] in place by id and return the gathered counts."""
    stats = stats if stats is not None else SortStats()
    pending = [(start, end)]
    while pending:
        low, high = pending.pop()
        if low >= high:
            continue
        middle = partition(records, low, high, stats)
        pending.append((middle + 1, high))
        pending.append((low, middle - 1))
    return stats


def quick_sort_with_logs(records: RecordFile, description: str | None = None, log_path=DEFAULT_LOG_PATH) -> SortStats:
    """Sort the whole file, log the counts and elapsed time, and return the counts."""
    if description is None:
        description = f"Quick Sort - {_LABELS[records.record_type]}"
    started = time.process_time()
    stats = quick_sort(records, 0, len(records) - 1)
    elapsed = time.process_time() - started
    log_sort(log_path, description, stats, elapsed)
    return stats


def sort_all(clients: RecordFile, books: RecordFile, loans: RecordFile,
             log_path=DEFAULT_LOG_PATH, status_path="status.txt") -> None:
    """Sort the three databases and mark them as sorted."""
    quick_sort_with_logs(clients, "Quick Sort - CLIENTE", log_path)
    quick_sort_with_logs(books, "Quick Sort - LIVRO", log_path)
    quick_sort_with_logs(loans, "Quick Sort - EMPRESTIMO", log_path)
    save_sorted_status(status_path, True)