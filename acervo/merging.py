"""K-way merge of sorted partition files back into a record file."""

from __future__ import annotations

import sys
import time
from contextlib import ExitStack
from pathlib import Path

from .entities import Book, Client, Loan, RecordFile

DEFAULT_LOG_PATH = "logs/logs_intercalcacao.txt"

_LABELS = {Client: "CLIENTE", Book: "LIVRO", Loan: "EMPRESTIMO"}


def log_merge(log_path, description: str, count: int, seconds: float) -> None:
    """Append one merge entry to the log; a log that cannot be opened is reported and skipped."""
    if log_path is None:
        return
    entry = (
        "*****************************************\n"
        f"{description}: \n"
        f"Numero de particoes criadas: {count}\n"
        f"Tempo de execucao: {seconds:.2f} segundos\n\n"
    )
    try:
        with open(log_path, "a", encoding="utf-8") as log:
            log.write(entry)
    except OSError:
        print("Erro ao abrir o ficheiro de logs.", file=sys.stderr)


def partition_path(directory, index: int) -> Path:
    return Path(directory) / f"partition{index}.dat"


def copy_records(source: RecordFile, destination: RecordFile) -> int:
    """Overwrite the destination from its start with every record of the source; return the count."""
    copied = 0
    for index, record in enumerate(source):
        destination.write_at(index, record)
        copied += 1
    return copied


def merge_partitions(total: int, directory, target: RecordFile, record_type=None,
                     log_path=DEFAULT_LOG_PATH) -> int:
    """Merge partitions 0..total-1 in ``directory`` into ``target`` by id; return the record count."""
    record_type = record_type or target.record_type
    directory = Path(directory)
    paths = [partition_path(directory, index) for index in range(total)]
    for path in paths:
        if not path.is_file():
            raise FileNotFoundError(f"partition file not found: {path}")

    started = time.process_time()
    comparisons = 0
    written = 0
    with ExitStack() as stack:
        sources = [iter(stack.enter_context(RecordFile(path, record_type))) for path in paths]
        final = stack.enter_context(RecordFile(directory / "arq_final.dat", record_type))
        final.clear()
        heads = [next(source, None) for source in sources]
        while any(head is not None for head in heads):
            comparisons += total
            smallest = min(
                (index for index, head in enumerate(heads) if head is not None),
                key=lambda index: heads[index].id,
            )
            final.append(heads[smallest])
            heads[smallest] = next(sources[smallest], None)
            written += 1
        elapsed = time.process_time() - started
        log_merge(log_path, f"Intercalacao Otima - {_LABELS[record_type]}", comparisons, elapsed)
        copy_records(final, target)
    return written