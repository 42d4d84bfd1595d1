"""Command entry point: builds the databases and runs the interactive menus."""

from __future__ import annotations

import argparse
import random
import sys
from contextlib import ExitStack
from pathlib import Path

from .cli import LibraryShell
from .entities import (
    Book,
    Client,
    Loan,
    RecordFile,
    create_databases,
    format_book,
    format_client,
    format_loan,
)
from .hashing import HashTable

DEFAULT_SIZE = 300
CLIENTS_FILE = "arq_clientes.dat"
BOOKS_FILE = "arq_livros.dat"
LOANS_FILE = "arq_emprestimos.dat"
HASH_FILE = "tabela_hash.dat"

_WELCOME = ("**************** BEM VINDO AO SISTEMA DE GERENCIAMENTO DE BIBLIOTECA "
            "************************")
_GOODBYE = "**************** OBRIGADO POR UTILIZAR NOSSO SISTEMA ! ************************\n"


def _write(shell: LibraryShell, text: str) -> None:
    shell.stdout.write(text)
    shell.stdout.flush()


def _read_option(shell: LibraryShell) -> int:
    """Read a menu option; end of input means leave, anything not a number is invalid."""
    line = shell.stdin.readline()
    if line == "":
        return 0
    try:
        return int(line.strip())
    except ValueError:
        return -1


def _print_all(shell: LibraryShell, records: RecordFile, formatter) -> None:
    _write(shell, "".join(formatter(record) for record in records))


def run_hash_menu(shell: LibraryShell, table: HashTable) -> None:
    """Serve the hash index menu until the user chooses to leave."""
    actions = {
        1: lambda: shell.hash_insert_client(table),
        2: lambda: shell.hash_find_client(table),
        3: lambda: shell.hash_delete_client(table),
        4: lambda: _write(shell, table.format_table()),
        5: lambda: _write(shell, table.format_chains()),
        6: lambda: _print_all(shell, shell.clients, format_client),
    }
    while True:
        shell.hash_menu()
        option = _read_option(shell)
        if option == 0:
            return
        action = actions.get(option)
        if action is None:
            _write(shell, "[ERRO] Opcao invalida!\n")
            continue
        try:
            action()
        except EOFError:
            return


def _create(shell: LibraryShell, shuffle: bool) -> None:
    size = shell._ask_int("Digite o tamanho da base de dados que deseja criar: ")
    create_databases(shell.clients, shell.books, shell.loans, size, shuffle, shell.status_path)


def run_main_menu(shell: LibraryShell) -> None:
    """Serve the full library menu until the user chooses to leave."""
    actions = {
        1: shell.register_client,
        2: shell.edit_client,
        3: shell.find_client,
        4: lambda: _print_all(shell, shell.clients, format_client),
        5: shell.register_book,
        6: shell.edit_book,
        7: shell.find_book,
        8: lambda: _print_all(shell, shell.books, format_book),
        9: shell.register_loan,
        10: shell.return_book,
        11: shell.renew_loan,
        12: shell.find_loan,
        13: lambda: _print_all(shell, shell.loans, format_loan),
        14: lambda: _create(shell, False),
        15: lambda: _create(shell, True),
        16: shell.start_sorting,
    }
    _write(shell, _WELCOME)
    while True:
        shell.main_menu()
        option = _read_option(shell)
        if option == 0:
            break
        action = actions.get(option)
        if action is None:
            _write(shell, "[AVISO]: Opcao invalida! Digite novamente!\n")
            continue
        try:
            action()
        except EOFError:
            break
    _write(shell, _GOODBYE)


def _parse(argv) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="acervo", description="Library database manager.")
    parser.add_argument("--workdir", default=".", help="directory holding the database files")
    parser.add_argument("--size", type=int, default=DEFAULT_SIZE,
                        help="number of records generated at start")
    parser.add_argument("--seed", type=int, default=None, help="seed for shuffling the ids")
    parser.add_argument("--menu", choices=("hash", "library"), default="hash",
                        help="which menu to run")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse(argv)
    workdir = Path(args.workdir)
    rng = random.Random(args.seed) if args.seed is not None else None

    with ExitStack() as stack:
        try:
            workdir.mkdir(parents=True, exist_ok=True)
            clients = stack.enter_context(RecordFile(workdir / CLIENTS_FILE, Client))
            books = stack.enter_context(RecordFile(workdir / BOOKS_FILE, Book))
            loans = stack.enter_context(RecordFile(workdir / LOANS_FILE, Loan))
        except OSError as error:
            print(f"[ERRO]: Não foi possivel abrir os arquivos: {error}")
            return 1
        for records in (clients, books, loans):
            records.clear()

        shell = LibraryShell(clients, books, loans, workdir)
        create_databases(clients, books, loans, args.size, True, shell.status_path, rng)

        if args.menu == "library":
            run_main_menu(shell)
            return 0

        table = HashTable(workdir / HASH_FILE, clients)
        stack.callback(table.close)
        table.build()
        _write(shell, table.format_table())
        run_hash_menu(shell, table)
    return 0


if __name__ == "__main__":
    sys.exit(main())