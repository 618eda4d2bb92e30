from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, RichLog, Static

from leitor_nfse.models.nfse import InvoiceDetail, Party
from leitor_nfse.utils.formatters import format_brl, format_cnpj, format_cpf


def _party_lines(role: str, party: Party) -> list[str]:
    lines = [f"{role}: {party.legal_name}"]
    if party.tax_id.cnpj is not None:
        lines.append(f"CNPJ {role}: {format_cnpj(party.tax_id.cnpj)}")
    if party.tax_id.cpf is not None:
        lines.append(f"CPF {role}: {format_cpf(party.tax_id.cpf)}")
    return lines


def detail_lines(invoice: InvoiceDetail) -> list[str]:
    """All fields of one NFS-e, one label per line."""
    return [
        f"Número: {invoice.number}",
        f"Data de Emissão: {invoice.issue_date}",
        *_party_lines("Prestador", invoice.provider),
        *_party_lines("Tomador", invoice.recipient),
        f"Valor: {format_brl(invoice.service.amount)}",
        "Descrição:",
        invoice.service.description,
    ]


class DetailScreen(ModalScreen):
    """Full view of a single NFS-e."""

    BINDINGS = [
        Binding("escape", "go_back", "Voltar"),
        Binding("q", "go_back", show=False),
    ]

    def __init__(self, invoice: InvoiceDetail) -> None:
        super().__init__()
        self.invoice = invoice

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static(f"NFS-e {self.invoice.number}", id="header-bar")
                yield Button("✕", id="btn-modal-close")
            yield RichLog(id="detail-output", wrap=True, markup=False)
            with Horizontal(classes="button-bar"):
                yield Button("✕ Fechar", id="btn-voltar", variant="error")

    def on_mount(self) -> None:
        log = self.query_one("#detail-output", RichLog)
        for line in detail_lines(self.invoice):
            log.write(Text(line))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "btn-voltar" | "btn-modal-close":
                self.app.pop_screen()

    def action_go_back(self) -> None:
        self.app.pop_screen()
