from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest

from leitor_nfse.cli import _configure_logging, _init_config, main
from leitor_nfse.config import Settings


class TestMain:
    @patch("leitor_nfse.cli._configure_logging")
    @patch("leitor_nfse.config.load_settings", return_value=Settings(batch_mode="partial"))
    @patch("leitor_nfse.tui.app.LeitorApp")
    def test_launches_tui_with_paths(self, mock_app_cls, mock_settings, mock_logging):
        mock_app = MagicMock()
        mock_app_cls.return_value = mock_app
        with patch("sys.argv", ["leitor-nfse", "a.xml", "pasta"]):
            main()
        mock_app_cls.assert_called_once_with(
            paths=["a.xml", "pasta"], settings=Settings(batch_mode="partial")
        )
        mock_app.run.assert_called_once()
        mock_logging.assert_called_once()

    @patch("leitor_nfse.cli._configure_logging")
    @patch("leitor_nfse.tui.app.LeitorApp")
    def test_launches_tui_without_paths(self, mock_app_cls, mock_logging, monkeypatch, tmp_path):
        monkeypatch.setenv("LEITOR_NFSE_CONFIG_DIR", str(tmp_path))
        with patch("sys.argv", ["leitor-nfse"]):
            main()
        mock_app_cls.assert_called_once_with(paths=[], settings=Settings())

    @patch("leitor_nfse.cli._init_config")
    def test_init_dispatches(self, mock_init):
        with patch("sys.argv", ["leitor-nfse", "init"]):
            main()
        mock_init.assert_called_once()


class TestInitConfig:
    def test_creates_settings(self, monkeypatch, tmp_path, capsys):
        config_dir = tmp_path / "config"
        monkeypatch.setenv("LEITOR_NFSE_CONFIG_DIR", str(config_dir))
        _init_config()
        created = config_dir / "settings.yaml"
        assert created.is_file()
        assert "batch_mode" in created.read_text()
        assert "criado" in capsys.readouterr().out

    def test_does_not_overwrite(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("LEITOR_NFSE_CONFIG_DIR", str(tmp_path))
        existing = tmp_path / "settings.yaml"
        existing.write_text("batch_mode: partial\n")
        _init_config()
        assert existing.read_text() == "batch_mode: partial\n"
        assert "já existe" in capsys.readouterr().out


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for h in root.handlers:
            if h not in handlers:
                h.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_writes_to_log_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LEITOR_NFSE_LOG_DIR", str(tmp_path / "logs"))
        monkeypatch.delenv("LEITOR_NFSE_LOG_LEVEL", raising=False)
        log_file = _configure_logging(Settings(log_level="INFO"))
        assert log_file == tmp_path / "logs" / "leitor-nfse.log"
        assert logging.getLogger().level == logging.INFO
        logging.getLogger("leitor_nfse.test").info("hello")
        for h in logging.getLogger().handlers:
            h.flush()
        assert "hello" in log_file.read_text()

    def test_unwritable_log_dir(self, monkeypatch, tmp_path, capsys):
        blocker = tmp_path / "file"
        blocker.write_text("")
        monkeypatch.setenv("LEITOR_NFSE_LOG_DIR", str(blocker / "logs"))
        assert _configure_logging(Settings()) is None
        assert "AVISO" in capsys.readouterr().err
