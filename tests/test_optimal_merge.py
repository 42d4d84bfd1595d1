import random
from datetime import date

import pytest

from acervo.entities import Client, Loan, RecordFile, default_client, default_loan
from acervo.merging import partition_path
from acervo.optimal_merge import optimal_merge


def write_partition(directory, index, records, record_type=Client):
    with RecordFile(partition_path(directory, index), record_type) as part:
        part.clear()
        for record in records:
            part.append(record)


def write_client_partitions(directory, groups):
    for index, ids in enumerate(groups):
        write_partition(directory, index, [default_client(i) for i in ids])


@pytest.fixture
def target(tmp_path):
    with RecordFile(tmp_path / "target.dat", Client) as records:
        yield records


def test_merges_sorted_partitions_into_target(tmp_path, target):
    groups = [[1, 4, 7], [2, 5, 8], [3, 6, 9], [10, 11]]
    write_client_partitions(tmp_path, groups)
    log = tmp_path / "merge.log"

    copied = optimal_merge(2, len(groups), tmp_path, target, Client, log)

    all_ids = [i for ids in groups for i in ids]
    assert copied == len(all_ids)
    assert [c.id for c in target] == sorted(all_ids)


def test_final_partition_holds_merged_records(tmp_path, target):
    write_client_partitions(tmp_path, [[3, 9], [1, 5], [2, 8]])

    optimal_merge(2, 3, tmp_path, target, Client, tmp_path / "merge.log")

    final = partition_path(tmp_path, 4)
    assert final.is_file()
    assert not partition_path(tmp_path, 5).exists()
    with RecordFile(final, Client) as merged:
        assert [c.id for c in merged] == [c.id for c in target]


def test_single_pass_when_fan_in_covers_all(tmp_path, target):
    groups = [[5, 6], [1, 9], [2, 3]]
    write_client_partitions(tmp_path, groups)
    log = tmp_path / "merge.log"

    optimal_merge(len(groups), len(groups), tmp_path, target, Client, log)

    assert partition_path(tmp_path, len(groups)).is_file()
    assert not partition_path(tmp_path, len(groups) + 1).exists()
    text = log.read_text(encoding="utf-8")
    assert "Intercalacao Otima - CLIENTE: \n" in text
    assert "Numero de particoes criadas: 1\n" in text


def test_single_partition_is_copied(tmp_path, target):
    write_client_partitions(tmp_path, [[4, 7, 12]])

    copied = optimal_merge(2, 1, tmp_path, target, Client, tmp_path / "merge.log")

    assert copied == 3
    assert [c.id for c in target] == [4, 7, 12]
    assert not partition_path(tmp_path, 1).exists()


def test_equal_ids_keep_partition_order(tmp_path, target):
    write_partition(tmp_path, 0, [Client(1, "first", "111.111.111-11")])
    write_partition(tmp_path, 1, [Client(1, "second", "222.222.222-22")])

    optimal_merge(2, 2, tmp_path, target, Client, None)

    assert [c.name for c in target] == ["first", "second"]


def test_overwrites_existing_target_records(tmp_path, target):
    for client_id in (30, 20, 10):
        target.append(default_client(client_id))
    write_client_partitions(tmp_path, [[20], [10, 30]])

    optimal_merge(2, 2, tmp_path, target, None, None)

    assert [c.id for c in target] == [10, 20, 30]


@pytest.mark.parametrize("fan_in, total", [(2, 7), (3, 7), (4, 9), (5, 2)])
def test_random_partitions_merge_to_sorted_target(tmp_path, target, fan_in, total):
    rng = random.Random(fan_in * 100 + total)
    groups = [sorted(rng.sample(range(1000), rng.randint(0, 6))) for _ in range(total)]
    write_client_partitions(tmp_path, groups)

    copied = optimal_merge(fan_in, total, tmp_path, target, Client, None)

    all_ids = sorted(i for ids in groups for i in ids)
    assert copied == len(all_ids)
    assert [c.id for c in target] == all_ids


def test_merges_loans(tmp_path):
    today = date(2024, 3, 1)
    write_partition(tmp_path, 0, [default_loan(2, today), default_loan(6, today)], Loan)
    write_partition(tmp_path, 1, [default_loan(1, today), default_loan(4, today)], Loan)
    log = tmp_path / "merge.log"

    with RecordFile(tmp_path / "loans.dat", Loan) as loans:
        optimal_merge(2, 2, tmp_path, loans, Loan, log)
        merged = list(loans)

    assert [loan.id for loan in merged] == [1, 2, 4, 6]
    assert all(loan.loan_date == today for loan in merged)
    assert "Intercalacao Otima - EMPRESTIMO" in log.read_text(encoding="utf-8")


@pytest.mark.parametrize("fan_in", [0, 1])
def test_fan_in_below_two_is_rejected(tmp_path, target, fan_in):
    write_client_partitions(tmp_path, [[1], [2]])
    with pytest.raises(ValueError):
        optimal_merge(fan_in, 2, tmp_path, target, Client, None)


def test_no_partitions_is_rejected(tmp_path, target):
    with pytest.raises(ValueError):
        optimal_merge(2, 0, tmp_path, target, Client, None)


def test_missing_partition_raises(tmp_path, target):
    write_client_partitions(tmp_path, [[1, 2]])
    with pytest.raises(FileNotFoundError):
        optimal_merge(2, 2, tmp_path, target, Client, None)