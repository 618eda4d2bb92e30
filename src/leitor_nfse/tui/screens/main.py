from __future__ import annotations

import logging
import os
from pathlib import Path

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.screen import Screen
from textual.widgets import Button, DataTable, Footer, Input, Label, Static
from textual.worker import get_current_worker

from leitor_nfse.models.nfse import InvoiceDetail
from leitor_nfse.services.batch import BatchResult, BatchStatus
from leitor_nfse.utils.formatters import format_brl, format_tax_id

logger = logging.getLogger(__name__)

PATH_SEPARATOR = ";"
MAX_LISTED_FILES = 10

COLUMNS = (
    "Número",
    "Emissão",
    "Prestador",
    "CNPJ/CPF Prestador",
    "Tomador",
    "CNPJ/CPF Tomador",
    "Valor",
    "Descrição",
)


def split_paths(value: str) -> list[Path]:
    """Split the path input on ';' and expand ~, ignoring empty entries."""
    return [
        Path(os.path.expanduser(part.strip()))
        for part in value.split(PATH_SEPARATOR)
        if part.strip()
    ]


def _row(invoice: InvoiceDetail) -> list[Text]:
    description = " ".join(invoice.service.description.split())
    if len(description) > 60:
        description = description[:59] + "…"
    cells = [
        str(invoice.number),
        invoice.issue_date,
        invoice.provider.legal_name,
        format_tax_id(invoice.provider.tax_id),
        invoice.recipient.legal_name,
        format_tax_id(invoice.recipient.tax_id),
        format_brl(invoice.service.amount),
        description,
    ]
    # Text cells keep brackets in invoice data from being read as markup
    return [Text(c) for c in cells]


class MainScreen(Screen):
    """File selection and the table of processed NFS-e."""

    BINDINGS = [
        Binding("ctrl+r", "process", "Processar"),
        Binding("escape", "focus_input", "Caminho"),
    ]

    def __init__(self, initial_paths: list[Path] | None = None) -> None:
        super().__init__()
        self._initial_paths = initial_paths or []
        self._result = BatchResult.idle()

    @property
    def result(self) -> BatchResult:
        return self._result

    def compose(self) -> ComposeResult:
        with Horizontal(id="top-bar"):
            yield Static("Processador de Notas Fiscais", id="app-title")
        with Horizontal(id="path-bar"):
            yield Input(
                placeholder="Arquivo(s) XML ou pasta (separe vários com ;)",
                id="path-input",
                tooltip="Pastas são percorridas recursivamente em busca de arquivos .xml",
            )
            yield Button(
                "▶ Processar",
                id="btn-process",
                variant="primary",
                tooltip="Processar os arquivos informados (ctrl+r)",
            )
        yield Static("", id="files-label", markup=False)
        yield Static("", id="error-label", markup=False)
        yield Label("", id="count-label")
        yield DataTable(id="invoice-table", cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#invoice-table", DataTable)
        table.add_columns(*COLUMNS)
        path_input = self.query_one("#path-input", Input)
        if self._initial_paths:
            path_input.value = PATH_SEPARATOR.join(str(p) for p in self._initial_paths)
        else:
            start_dir = self.app.settings.start_dir  # type: ignore[attr-defined]
            if start_dir is not None:
                path_input.value = str(start_dir)
        self.show_result(BatchResult.idle())
        path_input.focus()
        if self._initial_paths:
            self.action_process()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.action_process()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "btn-process":
                self.action_process()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self._open_detail(event.cursor_row)

    # --- Actions ---

    def action_process(self) -> None:
        paths = split_paths(self.query_one("#path-input", Input).value)
        self.show_result(BatchResult.idle())
        if not paths:
            self.query_one("#error-label", Static).update("Informe um arquivo XML ou uma pasta")
            return
        self.notify("Processando notas fiscais…", severity="information", timeout=2)
        self._run_batch(paths)

    def action_focus_input(self) -> None:
        self.query_one("#path-input", Input).focus()

    @work(thread=True, exclusive=True)
    def _run_batch(self, paths: list[Path]) -> None:
        from leitor_nfse.services.batch import expand_paths, run_batch

        partial = self.app.settings.partial  # type: ignore[attr-defined]
        try:
            result = run_batch(expand_paths(paths), partial=partial)
        except Exception as e:
            logger.exception("Unexpected error while processing batch")
            result = BatchResult(status=BatchStatus.FAILED, error=f"Erro inesperado: {e}")
        if get_current_worker().is_cancelled:
            return
        self.app.call_from_thread(self.show_result, result)

    # --- Display ---

    def show_result(self, result: BatchResult) -> None:
        """Replace everything on screen with *result*."""
        self._result = result
        table = self.query_one("#invoice-table", DataTable)
        table.clear()
        for invoice in result.records:
            table.add_row(*_row(invoice))

        self.query_one("#files-label", Static).update(self._files_text(result))
        self.query_one("#error-label", Static).update(self._error_text(result))
        self.query_one("#count-label", Label).update(
            f"Notas Fiscais Processadas: {len(result.records)}"
        )

        if result.status is BatchStatus.FAILED:
            self.notify("Erro ao processar arquivos", severity="error", timeout=5)
        elif result.status is BatchStatus.DONE:
            if result.failures:
                self.notify(result.error or "", severity="warning", timeout=5)
            else:
                self.notify(f"{len(result.records)} nota(s) processada(s)", timeout=3)

    @staticmethod
    def _files_text(result: BatchResult) -> str:
        if not result.paths:
            return "Arquivos Selecionados: nenhum arquivo selecionado."
        lines = [f"Arquivos Selecionados ({len(result.paths)}):"]
        lines.extend(str(p) for p in result.paths[:MAX_LISTED_FILES])
        hidden = len(result.paths) - MAX_LISTED_FILES
        if hidden > 0:
            lines.append(f"… e mais {hidden} arquivo(s)")
        return "\n".join(lines)

    @staticmethod
    def _error_text(result: BatchResult) -> str:
        if result.status is BatchStatus.FAILED:
            return result.error or ""
        if result.failures:
            return "\n".join([result.error or ""] + [f.message for f in result.failures])
        return ""

    def _open_detail(self, index: int) -> None:
        if not 0 <= index < len(self._result.records):
            return
        from leitor_nfse.tui.screens.detail import DetailScreen

        self.app.push_screen(DetailScreen(self._result.records[index]))
