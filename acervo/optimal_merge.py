"""Multi-pass merge of sorted partitions driven by a queue of partition files."""

from __future__ import annotations

import heapq
import time
from collections import deque
from contextlib import ExitStack
from pathlib import Path

from .entities import Book, Client, Loan, RecordFile
from .merging import DEFAULT_LOG_PATH, copy_records, log_merge, partition_path

_LABELS = {Client: "CLIENTE", Book: "LIVRO", Loan: "EMPRESTIMO"}


def _merge_group(paths: list[Path], output: Path, record_type) -> None:
    """Merge the given partitions by id into a fresh partition at ``output``."""
    with ExitStack() as stack:
        sources = [stack.enter_context(RecordFile(path, record_type)) for path in paths]
        merged = stack.enter_context(RecordFile(output, record_type))
        merged.clear()
        # heapq.merge takes the smallest head each step, preferring earlier partitions on ties.
        for record in heapq.merge(*sources, key=lambda record: record.id):
            merged.append(record)


def optimal_merge(fan_in: int, total: int, directory, target: RecordFile, record_type=None,
                  log_path=DEFAULT_LOG_PATH) -> int:
    """Merge partitions 0..total-1 in ``directory`` ``fan_in`` at a time until one is left.

    Each merge writes a new partition numbered after the last one and puts it at
    the back of the queue. The last partition is copied into ``target``; the number
    of records copied is returned.
    """
    if fan_in < 2:
        raise ValueError(f"fan-in must be at least 2, got {fan_in}")
    if total < 1:
        raise ValueError(f"there must be at least one partition, got {total}")

    record_type = record_type or target.record_type
    directory = Path(directory)
    queue = deque(partition_path(directory, index) for index in range(total))
    for path in queue:
        if not path.is_file():
            raise FileNotFoundError(f"partition file not found: {path}")

    started = time.process_time()
    next_index = total
    while len(queue) > 1:
        group = [queue.popleft() for _ in range(min(fan_in, len(queue)))]
        output = partition_path(directory, next_index)
        _merge_group(group, output, record_type)
        queue.append(output)
        next_index += 1

    final_path = partition_path(directory, next_index - 1)
    elapsed = time.process_time() - started
    log_merge(log_path, f"Intercalacao Otima - {_LABELS[record_type]}", next_index - total, elapsed)

    with RecordFile(final_path, record_type) as final:
        return copy_records(final, target)