from __future__ import annotations

from decimal import Decimal

import pytest

from leitor_nfse.models.nfse import (
    Invoice,
    InvoiceDetail,
    InvoiceEnvelope,
    InvoiceResponse,
    Party,
    Service,
    TaxId,
)

ABRASF_NS = "http://www.abrasf.org.br/nfse.xsd"


def comp_nfse(
    numero: str = "101",
    data_emissao: str = "2024-03-15T10:30:00",
    valor: str | None = "1500.50",
    discriminacao: str = "Consultoria em TI",
    prestador_nome: str = "ACME SOFTWARE LTDA",
    prestador_id: str = "<Cnpj>12345678000199</Cnpj>",
    tomador_nome: str = "Fulano de Tal",
    tomador_id: str = "<Cpf>12345678901</Cpf>",
) -> str:
    """Build one <CompNfse> element. ``valor=None`` omits ValorServicos."""
    valores = f"<ValorServicos>{valor}</ValorServicos>" if valor is not None else ""
    return (
        "<CompNfse><Nfse><InfNfse>"
        f"<Numero>{numero}</Numero>"
        "<CodigoVerificacao>ABC123</CodigoVerificacao>"
        f"<DataEmissao>{data_emissao}</DataEmissao>"
        f"<Servico><Valores>{valores}<IssRetido>2</IssRetido></Valores>"
        f"<Discriminacao>{discriminacao}</Discriminacao></Servico>"
        "<PrestadorServico>"
        f"<IdentificacaoPrestador>{prestador_id}</IdentificacaoPrestador>"
        f"<RazaoSocial>{prestador_nome}</RazaoSocial>"
        "</PrestadorServico>"
        "<TomadorServico>"
        f"<IdentificacaoTomador><CpfCnpj>{tomador_id}</CpfCnpj></IdentificacaoTomador>"
        f"<RazaoSocial>{tomador_nome}</RazaoSocial>"
        "</TomadorServico>"
        "</InfNfse></Nfse></CompNfse>"
    )


def nfse_document(*comps: str, namespace: str | None = ABRASF_NS, bom: bool = False) -> str:
    """Wrap CompNfse elements in a ConsultarNfseResposta document."""
    xmlns = f' xmlns="{namespace}"' if namespace else ""
    doc = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<ConsultarNfseResposta{xmlns}><ListaNfse>"
        + "".join(comps)
        + "</ListaNfse></ConsultarNfseResposta>"
    )
    return ("\ufeff" + doc) if bom else doc


@pytest.fixture
def write_xml(tmp_path):
    """Write text to tmp_path/<name> as UTF-8 and return the path."""

    def _write(name: str, text: str):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_detail() -> InvoiceDetail:
    return InvoiceDetail(
        number=101,
        issue_date="2024-03-15T10:30:00",
        service=Service(amount=Decimal("1500.50"), description="Consultoria em TI"),
        provider=Party(legal_name="ACME SOFTWARE LTDA", tax_id=TaxId(cnpj="12345678000199")),
        recipient=Party(legal_name="Fulano de Tal", tax_id=TaxId(cpf="12345678901")),
    )


@pytest.fixture
def sample_response(sample_detail) -> InvoiceResponse:
    return InvoiceResponse(envelopes=(InvoiceEnvelope(invoice=Invoice(detail=sample_detail)),))
