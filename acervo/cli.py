"""Interactive text interface for the library databases and the client hash index."""

from __future__ import annotations

import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

from . import merging, natural_selection as selection, quicksort, searching
from .entities import (
    Book,
    Client,
    Loan,
    RecordFile,
    add_days,
    format_book,
    format_client,
    format_loan,
    late_days,
    read_sorted_status,
    save_sorted_status,
)
from .hashing import ClientNotFoundError, HashTable
from .optimal_merge import optimal_merge

FINE_PER_DAY = 1.50
LOAN_VALUE = 5.00
LOAN_DAYS = 7

_MAIN_MENU = """
==================================================
                  MENU DE OPCOES                 
==================================================

Clientes
--------------------------------------------------
 [1] Inserir um novo cliente
 [2] Atualizar dados de um cliente
 [3] Buscar cliente
 [4] Imprimir base de dados de clientes

Livros
--------------------------------------------------
 [5] Inserir um novo livro
 [6] Atualizar dados de um livro
 [7] Buscar livro
 [8] Imprimir base de dados de livros

Emprestimos
--------------------------------------------------
 [9] Registrar um novo emprestimo
 [10] Realizar devolucao
 [11] Renovar emprestimo
 [12] Buscar emprestimo
 [13] Imprimir base de dados de emprestimos

Base de Dados
--------------------------------------------------
 [14] Gerar base de dados ordenada
 [15] Gerar base de dados desordenada
 [16] Ordenar bases de dados

[0] Sair
==================================================
Selecione uma opcao: """

_SEARCH_MENU = "\n\n[1] Busca sequencial\n[2] Busca binaria\nSelecione o tipo de busca: "

_HASH_MENU = """
==================================================
              MENU DE OPCOES - HASH               
==================================================

Funcoes da HASH
--------------------------------------------------
 [1] Inserir um novo cliente
 [2] Buscar cliente
 [3] Excluir um cliente
 [4] Imprimir tabela HASH
 [5] Imprimir encadeamento da tabela HASH
 [6] Imprimir base de clientes
--------------------------------------------------

Digite uma opcao: """

_BAD_DATA = "\n\n[AVISO]: Dados digitados incorretamente! Tente novamente!\n"
_BAD_OPTION = "[AVISO]: Opcao invalida! Digite novamente!"
_UNSORTED = "\n[ERRO]: A base de dados esta desordenada. Utilize a busca sequencial!\n"
_CPF_PROMPT = "Digite o cpf(XXX.XXX.XXX-XX): "


def _valid_cpf(cpf: str) -> bool:
    return len(cpf) >= 12 and cpf[3] == "." and cpf[7] == "." and cpf[11] == "-"


def _fits(text: str, width: int) -> bool:
    return len(text.encode("utf-8")) <= width


class LibraryShell:
    """Prompts on ``stdout``, reads answers from ``stdin`` and works on the three record files."""

    def __init__(self, clients: RecordFile, books: RecordFile, loans: RecordFile,
                 workdir=".", stdin=None, stdout=None, today: date | None = None) -> None:
        self.clients = clients
        self.books = books
        self.loans = loans
        self.workdir = Path(workdir)
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.today = today
        (self.workdir / "logs").mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------ helpers

    @property
    def current_date(self) -> date:
        return self.today or date.today()

    @property
    def status_path(self) -> Path:
        return self.workdir / "status.txt"

    def _path(self, relative: str) -> Path:
        return self.workdir / relative

    def _write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def _ask(self, prompt: str) -> str:
        self._write(prompt)
        line = self.stdin.readline()
        if line == "":
            raise EOFError("no more input")
        return line.rstrip("\r\n")

    def _ask_int(self, prompt: str) -> int:
        while True:
            answer = self._ask(prompt).strip()
            try:
                return int(answer)
            except ValueError:
                self._write("\n[AVISO]: Valor invalido! Digite novamente!\n")

    def _ask_text(self, prompt: str, width: int) -> str:
        text = self._ask(prompt)
        while not _fits(text, width):
            self._write(_BAD_DATA)
            text = self._ask(prompt)
        return text

    def _ask_cpf(self) -> str:
        cpf = self._ask(_CPF_PROMPT).strip()
        while not (_valid_cpf(cpf) and _fits(cpf, 15)):
            self._write(_BAD_DATA)
            cpf = self._ask(_CPF_PROMPT).strip()
        return cpf

    def _ask_flag(self, prompt: str) -> bool:
        answer = self._ask(prompt).strip()[:1]
        while answer not in ("s", "n"):
            self._write(_BAD_DATA)
            answer = self._ask(prompt).strip()[:1]
        return answer == "s"

    def _choose_search(self) -> int:
        self.search_menu()
        option = self._ask_int("")
        while option not in (1, 2):
            self._write(_BAD_OPTION)
            self.search_menu()
            option = self._ask_int("")
        return option

    def _find(self, records: RecordFile, prompt: str, title: str, missing: str, formatter):
        code = self._ask_int(prompt)
        option = self._choose_search()
        if option == 2 and not read_sorted_status(self.status_path):
            self._write(_UNSORTED)
            return None
        log_path = self._path(searching.DEFAULT_LOG_PATH)
        if option == 1:
            found = searching.sequential_search(records, code, log_path)
        else:
            found = searching.binary_search(records, code, log_path)
        self._write(title)
        self._write(formatter(found) if found is not None else missing)
        return found

    def _sequential(self, records: RecordFile, key: int):
        return searching.sequential_search(records, key, self._path(searching.DEFAULT_LOG_PATH))

    def _ask_book_fields(self) -> tuple[str, str, str, int, bool]:
        title = self._ask_text("\nDigite o titulo do livro: ", 50)
        author = self._ask_text("\nDigite o autor do livro: ", 50)
        genre = self._ask_text("\nDigite o genero: ", 10)
        year = self._ask_int("Digite o ano de publicacao: ")
        available = self._ask_flag("Disponivel(s/n): ")
        return title, author, genre, year, available

    # ------------------------------------------------------------------ menus

    def main_menu(self) -> None:
        self._write(_MAIN_MENU)

    def search_menu(self) -> None:
        self._write(_SEARCH_MENU)

    # ------------------------------------------------------------------ clients

    def register_client(self) -> Client:
        """Ask for a name and CPF and append a new client with the next id."""
        name = self._ask_text("Digite o nome: ", 50)
        cpf = self._ask_cpf()
        client = Client(len(self.clients) + 1, name, cpf, -1, True)
        self.clients.append(client)
        self._write("Cliente cadastrado com sucesso!\n")
        self._write(format_client(client))
        return client

    def find_client(self) -> Client | None:
        return self._find(
            self.clients,
            "\nDigite o codigo do cliente buscado: ",
            "\nDados do cliente encontrado:\n",
            "[AVISO]: Cliente nao econtrado na base de dados!\n",
            format_client,
        )

    def edit_client(self) -> Client | None:
        """Replace the name and CPF of an existing client."""
        code = self._ask_int("\nDigite o codigo do cliente que voce deseja atualizar: ")
        found = self._sequential(self.clients, code)
        if found is None:
            self._write("[AVISO]: Cliente nao encontrado!")
            return None
        name = self._ask_text("Digite o nome: ", 50)
        cpf = self._ask_cpf()
        position = self.clients.position_of(found.id)
        client = Client(found.id, name, cpf, -1, True)
        self.clients.write_at(position, client)
        self._write("Cliente atualizado com sucesso!\n")
        self._write(format_client(client))
        return client

    # ------------------------------------------------------------------ books

    def register_book(self) -> Book:
        """Ask for the book's fields and append it with the next id."""
        title, author, genre, year, available = self._ask_book_fields()
        book = Book(len(self.books) + 1, title, author, genre, year, available)
        self.books.append(book)
        self._write("Livro cadastrado com sucesso!\n")
        self._write(format_book(book))
        return book

    def find_book(self) -> Book | None:
        return self._find(
            self.books,
            "\nDigite o codigo do livro buscado: ",
            "\nDados do livro encontrado:\n",
            "[AVISO]: Livro nao encontrado na base de dados!\n",
            format_book,
        )

    def edit_book(self) -> Book | None:
        """Replace every field of an existing book except its id."""
        code = self._ask_int("\nDigite o codigo do livro que voce deseja atualizar: ")
        found = self._sequential(self.books, code)
        if found is None:
            self._write("[AVISO]: Livro nao encontrado!")
            return None
        title, author, genre, year, available = self._ask_book_fields()
        position = self.books.position_of(found.id)
        book = Book(found.id, title, author, genre, year, available)
        self.books.write_at(position, book)
        self._write("Livro atualizado com sucesso!\n")
        self._write(format_book(book))
        return book

    # ------------------------------------------------------------------ loans

    def register_loan(self) -> Loan | None:
        """Lend an available book to a client for seven days."""
        book_code = self._ask_int("\nDigite o codigo do livro buscado: ")
        book = self._sequential(self.books, book_code)
        if book is None:
            self._write("[AVISO]: Livro nao encontrado.\n")
            return None
        client_code = self._ask_int("\nDigite o codigo do cliente buscado: ")
        client = self._sequential(self.clients, client_code)
        if client is None:
            self._write("[AVISO]: Cliente nao encontrado.\n")
            return None
        if not book.available:
            self._write("[AVISO]: O livro escolhido nao esta disponivel! "
                        "Escolha outro livro ou volte depois!\n")
            return None

        today = self.current_date
        position = self.books.position_of(book.id)
        self.books.write_at(position, replace(book, available=False))

        loan = Loan(len(self.loans) + 1, book, client, today, add_days(today, LOAN_DAYS),
                    LOAN_VALUE, False, 0.0, False)
        self._write(format_loan(loan))
        self.loans.append(loan)
        return loan

    def _open_loan(self) -> Loan | None:
        code = self._ask_int("Digite o codigo do emprestimo: ")
        loan = self._sequential(self.loans, code)
        if loan is None:
            self._write("[AVISO]: Codigo de emprestimo nao encontrado! Tente novamente!\n")
            return None
        if loan.returned:
            self._write("\n[AVISO]: Emprestimo ja finalizado!\n")
            return None
        return loan

    def return_book(self) -> Loan | None:
        """Close a loan, free its book and charge a fine per day late."""
        loan = self._open_loan()
        if loan is None:
            return None
        book = self._sequential(self.books, loan.book.id)
        if book is None:
            self._write("[AVISO]: Livro nao encontrado.\n")
            return None
        self.books.write_at(self.books.position_of(book.id), replace(book, available=True))

        today = self.current_date
        days = late_days(loan, today)
        closed = replace(loan, returned=True, fine=days * FINE_PER_DAY, late=today > loan.due_date)
        self.loans.write_at(self.loans.position_of(loan.id), closed)
        self._write(format_loan(closed))
        self._write("Livro devolvido!\n")
        return closed

    def renew_loan(self) -> Loan | None:
        """Push an open loan's due date seven days forward."""
        loan = self._open_loan()
        if loan is None:
            return None
        renewed = replace(loan, due_date=add_days(loan.due_date, LOAN_DAYS))
        self.loans.write_at(self.loans.position_of(loan.id), renewed)
        self._write(f"Emprestimo {loan.id} renovado com sucesso!\n")
        self._write(format_loan(renewed))
        return renewed

    def find_loan(self) -> Loan | None:
        return self._find(
            self.loans,
            "\nDigite o codigo do emprestimo buscado: ",
            "\nDados do livro encontrado:\n",
            "[AVISO]: Emprestimo nao encontrado na base de dados!\n",
            format_loan,
        )

    # ------------------------------------------------------------------ sorting

    def classify_and_merge(self, reservoir_size: int) -> bool:
        """Split each database into sorted partitions and merge them back; True on success."""
        selection_log = self._path(selection.DEFAULT_LOG_PATH)
        merge_log = self._path(merging.DEFAULT_LOG_PATH)
        jobs = [(self.clients, "cli"), (self.books, "livro"), (self.loans, "emp")]
        for _, name in jobs:
            self._path(name).mkdir(parents=True, exist_ok=True)

        try:
            first, first_dir = jobs[0]
            count = selection.natural_selection(first, reservoir_size, self._path(first_dir),
                                                selection_log)
            fan_in = self._ask_int(
                "Digite o numero de arquivo que você deseja manipular"
                f"(deve ser menor que {count}): "
            )
            if fan_in > count:
                self._write("O numero digitado foi maior que o numero de particoes existentes!")
                return False
            optimal_merge(fan_in, count, self._path(first_dir), first, log_path=merge_log)
            for records, name in jobs[1:]:
                count = selection.natural_selection(records, reservoir_size, self._path(name),
                                                    selection_log)
                optimal_merge(fan_in, count, self._path(name), records, log_path=merge_log)
        except ValueError as error:
            self._write(f"[ERRO]: {error}\n")
            return False

        save_sorted_status(self.status_path, True)
        return True

    def start_sorting(self) -> None:
        self._write("\n\n[1] Ordenar pelo QuickSort\n"
                    "[2] Ordenar pela classificacao e intercalacao\n"
                    "Selecione o tipo de ordenacao: ")
        option = self._ask_int("")
        if option == 1:
            quicksort.sort_all(self.clients, self.books, self.loans,
                               self._path(quicksort.DEFAULT_LOG_PATH), self.status_path)
        elif option == 2:
            size = self._ask_int("\nDigite o tamanho do reservatorio: ")
            self.classify_and_merge(size)
        else:
            self._write("[AVISO]: Opcao invalida!\n")
        self._write("[SUCESSO] Ordenação realizada com sucesso!\n")

    # ------------------------------------------------------------------ hash index

    def hash_menu(self) -> None:
        self._write(_HASH_MENU)

    def hash_insert_client(self, table: HashTable) -> Client:
        name = self._ask_text("\n\nDigite o nome: ", 50)
        cpf = self._ask_text(_CPF_PROMPT, 15).strip()
        stored = table.insert(Client(len(self.clients) + 1, name, cpf, -1, True))
        self._write("\n[SUCESSO] Cliente inserido com sucesso!\n")
        return stored

    def hash_find_client(self, table: HashTable) -> Client | None:
        code = self._ask_int("\nDigite o codigo do cliente buscado: ")
        client = table.search(code) if code >= 0 else None
        self._write(format_client(client) if client is not None
                    else "\n[ERRO] Cliente nao encontrado!\n")
        return client

    def hash_delete_client(self, table: HashTable) -> bool:
        code = self._ask_int("\nDigite o codigo do cliente a ser excluido: ")
        try:
            if code < 0:
                raise ClientNotFoundError(code)
            table.delete(code)
        except ClientNotFoundError:
            self._write("[ERRO]: Cliente não encontrado!\n")
            return False
        self._write("\n[SUCESSO]: Cliente excluido com sucesso!\n")
        return True