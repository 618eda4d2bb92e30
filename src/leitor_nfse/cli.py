from __future__ import annotations

import logging
import sys
from importlib.resources import files
from pathlib import Path

from leitor_nfse.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _init_config() -> None:
    """Copy the bundled settings template to the user's config directory."""
    from leitor_nfse.config import get_config_dir

    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    dest = config_dir / "settings.yaml"
    if dest.exists():
        print(f"  já existe: {dest}")
    else:
        src = files("leitor_nfse") / "templates" / "settings.yaml.example"
        with src.open("rb") as f:
            dest.write_bytes(f.read())
        print(f"  criado: {dest}")

    print()
    print(f"Configuração: {config_dir}")
    print("Edite settings.yaml e execute: leitor-nfse [ARQUIVO_OU_PASTA ...]")


def _configure_logging(settings: Settings) -> Path | None:
    """Send logs to a file, since the TUI owns the terminal.

    Returns the log file path, or None if the log directory is not writable.
    """
    from leitor_nfse.config import get_log_dir, get_log_level

    root = logging.getLogger()
    root.setLevel(get_log_level(settings))
    try:
        log_dir = get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "leitor-nfse.log"
        handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as e:
        print(f"AVISO: não foi possível criar o arquivo de log: {e}", file=sys.stderr)
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return log_file


def main() -> None:
    """Entry point for the leitor-nfse CLI/TUI.

    ``leitor-nfse init`` creates settings.yaml; any other arguments are files
    or folders processed as soon as the TUI starts.
    """
    args = sys.argv[1:]
    if args and args[0] == "init":
        _init_config()
        return

    from leitor_nfse.config import load_settings

    settings = load_settings()
    _configure_logging(settings)

    from leitor_nfse.tui.app import LeitorApp

    app = LeitorApp(paths=args, settings=settings)
    app.run()


if __name__ == "__main__":
    main()
