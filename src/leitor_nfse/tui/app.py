from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from textual.app import App
from textual.binding import Binding

from leitor_nfse.config import Settings


class LeitorApp(App):
    """Leitor NFS-e TUI application."""

    CSS_PATH = "app.tcss"
    TITLE = "Processador de Notas Fiscais"
    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("ctrl+q", "quit", "Sair", priority=True),
    ]

    def __init__(
        self,
        paths: Sequence[Path | str] = (),
        settings: Settings | None = None,
    ):
        super().__init__()
        self.initial_paths = [Path(p) for p in paths]
        self.settings = settings or Settings()

    def on_mount(self) -> None:
        from leitor_nfse.tui.screens.main import MainScreen

        self.push_screen(MainScreen(initial_paths=self.initial_paths))
