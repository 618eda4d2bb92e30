from __future__ import annotations

import pytest

from tests.conftest import comp_nfse, nfse_document


@pytest.fixture
def notas_dir(tmp_path):
    """Folder with two valid files (3 NFS-e) in a nested layout."""
    d = tmp_path / "notas"
    (d / "2024").mkdir(parents=True)
    (d / "a.xml").write_text(
        nfse_document(comp_nfse(numero="1"), comp_nfse(numero="2")), encoding="utf-8"
    )
    (d / "2024" / "b.xml").write_text(nfse_document(comp_nfse(numero="3")), encoding="utf-8")
    (d / "leia-me.txt").write_text("ignorado")
    return d


@pytest.fixture
def broken_xml(tmp_path):
    path = tmp_path / "quebrado.xml"
    path.write_text(nfse_document(comp_nfse(valor=None)), encoding="utf-8")
    return path


def plain(widget) -> str:
    """Rendered text of a Static/Label."""
    return str(widget.render())
