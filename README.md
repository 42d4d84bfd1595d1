# acervo

A small library management system kept in fixed-size binary record files.
It stores clients, books and loans, and offers:

- sequential and binary search over a record file (`acervo.searching`),
  each search appending its comparison count and time to a log;
- in-place quicksort of a record file by id (`acervo.quicksort`), logging
  comparisons and swaps;
- external sorting: natural selection with a reservoir splits a file into
  sorted partitions (`acervo.natural_selection`), and the partitions are
  merged back, several at a time, until one is left
  (`acervo.optimal_merge`); `acervo.merging` also offers a single k-way
  merge of all partitions;
- a hashed client index (`acervo.hashing.HashTable`, slot = `id mod 100`)
  chained through the client records, with insertion, lookup and deletion;
  ids of deleted clients are reused, oldest first, by later insertions.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running

```
acervo
```

Options:

- `--workdir DIR` — directory holding the database files (default: the
  current directory);
- `--size N` — number of records generated at start (default 300);
- `--seed N` — seed for shuffling the generated ids;
- `--menu {hash,library}` — which menu to run (default `hash`).

At start the command empties `arq_clientes.dat`, `arq_livros.dat` and
`arq_emprestimos.dat` in the working directory and fills them with `--size`
default records each, with shuffled ids, and writes `status.txt` marking the
databases as unsorted.

With `--menu hash` it builds the client index in `tabela_hash.dat`, prints
the table and opens the hash menu:

```
 [1] Inserir um novo cliente
 [2] Buscar cliente
 [3] Excluir um cliente
 [4] Imprimir tabela HASH
 [5] Imprimir encadeamento da tabela HASH
 [6] Imprimir base de clientes
```

With `--menu library` it opens the full menu: register, edit, search and list
clients and books; register, return, renew, search and list loans (a loan runs
seven days, costs R$5.00, and a late return is fined R$1.50 per day); generate
sorted or shuffled databases; and sort them by quicksort or by natural
selection and merging. Binary search is refused while `status.txt` says the
databases are unsorted.

In either menu, option `0` or the end of input leaves the program.

Search, sort, selection and merge logs are appended to text files under
`logs/` in the working directory. The external sort writes its partitions to
the `cli/`, `livro/` and `emp/` directories there.

## Using it as a library

```python
import random
from acervo.entities import Client, RecordFile, fill_clients
from acervo.quicksort import quick_sort_with_logs
from acervo.searching import binary_search

with RecordFile("clients.dat", Client) as clients:
    fill_clients(clients, 50, True, random.Random(1))
    quick_sort_with_logs(clients, "Quick Sort - CLIENTE", "sort.log")
    found = binary_search(clients, 42, "search.log")
    print(found.name)
```

`RecordFile` reads and writes `Client`, `Book` or `Loan` records by index,
iterates over them, and finds the position of an id with `position_of`.
`HashTable.search` returns the client or `None`; `HashTable.delete` raises
`ClientNotFoundError` when the id is not in the table.

## What it does not do

The data does not survive between runs: every start of the `acervo` command
regenerates the three databases, and the hash table is rebuilt from the
client file. The queue of freed client ids lives only in memory. There is no
way to open existing database files without refilling them.