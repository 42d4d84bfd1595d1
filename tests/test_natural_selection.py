import random

import pytest

from acervo.entities import Book, Client, RecordFile, default_client, shuffled_ids
from acervo.merging import merge_partitions, partition_path
from acervo.natural_selection import log_selection, natural_selection


def make_clients(path, ids):
    records = RecordFile(path, Client)
    records.clear()
    for client_id in ids:
        records.append(default_client(client_id))
    return records


def read_partitions(directory, count, record_type=Client):
    result = []
    for index in range(count):
        with RecordFile(partition_path(directory, index), record_type) as part:
            result.append(list(part))
    return result


@pytest.fixture
def workdir(tmp_path):
    directory = tmp_path / "cli"
    directory.mkdir()
    return directory


@pytest.mark.parametrize(
    "size, reservoir, seed",
    [(10, 3, 1), (25, 4, 2), (50, 5, 3), (7, 2, 4), (100, 10, 5), (30, 1, 6)],
)
def test_partitions_are_sorted_and_complete(tmp_path, workdir, size, reservoir, seed):
    ids = shuffled_ids(size, random.Random(seed))
    with make_clients(tmp_path / "clients.dat", ids) as records:
        count = natural_selection(records, reservoir, workdir, None)

    partitions = read_partitions(workdir, count)
    assert not partition_path(workdir, count).exists()
    for part in partitions:
        part_ids = [c.id for c in part]
        assert part_ids
        assert part_ids == sorted(part_ids)
    assert sorted(c.id for part in partitions for c in part) == sorted(ids)


def test_sorted_input_stays_in_order(tmp_path, workdir):
    ids = list(range(1, 11))
    with make_clients(tmp_path / "clients.dat", ids) as records:
        count = natural_selection(records, 3, workdir, None)

    flattened = [c.id for part in read_partitions(workdir, count) for c in part]
    assert flattened == ids


def test_reverse_input(tmp_path, workdir):
    ids = list(range(20, 0, -1))
    with make_clients(tmp_path / "clients.dat", ids) as records:
        count = natural_selection(records, 4, workdir, None)

    partitions = read_partitions(workdir, count)
    assert all([c.id for c in p] == sorted(c.id for c in p) for p in partitions)
    assert sorted(c.id for p in partitions for c in p) == sorted(ids)


def test_input_that_fits_in_reservoir_gives_one_partition(tmp_path, workdir):
    with make_clients(tmp_path / "clients.dat", [5, 2, 9, 1]) as records:
        count = natural_selection(records, 10, workdir, None)

    assert count == 1
    assert [c.id for c in read_partitions(workdir, 1)[0]] == [1, 2, 5, 9]


def test_empty_input_gives_no_partitions(tmp_path, workdir):
    with make_clients(tmp_path / "clients.dat", []) as records:
        count = natural_selection(records, 3, workdir, None)

    assert count == 0
    assert not partition_path(workdir, 0).exists()


def test_input_file_is_left_unchanged(tmp_path, workdir):
    ids = shuffled_ids(15, random.Random(9))
    with make_clients(tmp_path / "clients.dat", ids) as records:
        natural_selection(records, 4, workdir, None)
        assert [c.id for c in records] == ids


def test_book_contents_are_preserved(tmp_path, workdir):
    ids = shuffled_ids(12, random.Random(11))
    with RecordFile(tmp_path / "books.dat", Book) as books:
        for book_id in ids:
            books.append(Book(book_id, f"T{book_id}", f"A{book_id}", "G", 2000 + book_id, book_id % 2 == 0))
        count = natural_selection(books, 3, workdir, None)

    restored = [b for part in read_partitions(workdir, count, Book) for b in part]
    assert sorted(b.id for b in restored) == sorted(ids)
    for book in restored:
        assert book.title == f"T{book.id}"
        assert book.author == f"A{book.id}"
        assert book.year == 2000 + book.id
        assert book.available == (book.id % 2 == 0)


@pytest.mark.parametrize("reservoir", [0, -1])
def test_invalid_reservoir_size(tmp_path, workdir, reservoir):
    with make_clients(tmp_path / "clients.dat", [1, 2, 3]) as records:
        with pytest.raises(ValueError):
            natural_selection(records, reservoir, workdir, None)


def test_logs_partition_count(tmp_path, workdir):
    log = tmp_path / "selection.log"
    with make_clients(tmp_path / "clients.dat", shuffled_ids(20, random.Random(3))) as records:
        count = natural_selection(records, 4, workdir, log)

    text = log.read_text(encoding="utf-8")
    assert "Seleção natural - CLIENTE: \n" in text
    assert f"Numero de particoes criadas: {count}\n" in text


def test_log_selection_entry_format(tmp_path):
    log = tmp_path / "selection.log"
    log_selection(log, "Seleção natural - LIVRO", 5, 0.0)
    log_selection(log, "Seleção natural - LIVRO", 6, 0.0)

    entry = (
        "*****************************************\n"
        "Seleção natural - LIVRO: \n"
        "Numero de particoes criadas: {}\n"
        "Tempo de execucao: 0.00 segundos\n\n"
    )
    assert log.read_text(encoding="utf-8") == entry.format(5) + entry.format(6)


def test_selection_without_log_path_writes_no_log(tmp_path, workdir):
    with make_clients(tmp_path / "clients.dat", [3, 1, 2]) as records:
        count = natural_selection(records, 5, workdir, None)

    assert count == 1
    assert sorted(p.name for p in tmp_path.iterdir()) == ["cli", "clients.dat"]


def test_selection_then_merge_sorts_file(tmp_path, workdir):
    ids = shuffled_ids(40, random.Random(21))
    with make_clients(tmp_path / "clients.dat", ids) as records:
        count = natural_selection(records, 5, workdir, None)
        merge_partitions(count, workdir, records, Client, None)
        assert [c.id for c in records] == sorted(ids)