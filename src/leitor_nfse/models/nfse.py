"""NFS-e document model for ABRASF ``ConsultarNfseResposta`` files.

Records are frozen and built once per parse. Wire names are the XML local
names; namespaces are ignored when matching.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

# Wire names (ABRASF local names)
ROOT = "ConsultarNfseResposta"
LISTA_NFSE = "ListaNfse"
COMP_NFSE = "CompNfse"
NFSE = "Nfse"
INF_NFSE = "InfNfse"
NUMERO = "Numero"
DATA_EMISSAO = "DataEmissao"
SERVICO = "Servico"
VALORES = "Valores"
VALOR_SERVICOS = "ValorServicos"
DISCRIMINACAO = "Discriminacao"
PRESTADOR = "PrestadorServico"
TOMADOR = "TomadorServico"
RAZAO_SOCIAL = "RazaoSocial"
ID_PRESTADOR = "IdentificacaoPrestador"
ID_TOMADOR = "IdentificacaoTomador"
CPF_CNPJ = "CpfCnpj"  # container for TaxId
CNPJ = "Cnpj"
CPF = "Cpf"


@dataclass(frozen=True)
class TaxId:
    """CNPJ and/or CPF. Exclusivity is not enforced."""

    cnpj: str | None = None
    cpf: str | None = None

    @property
    def kind(self) -> str:
        if self.cnpj is not None and self.cpf is not None:
            return "both"
        if self.cnpj is not None:
            return "cnpj"
        if self.cpf is not None:
            return "cpf"
        return "neither"


@dataclass(frozen=True)
class Party:
    """Provider (prestador) or recipient (tomador) of the service."""

    legal_name: str
    tax_id: TaxId


@dataclass(frozen=True)
class Service:
    amount: Decimal
    description: str


@dataclass(frozen=True)
class InvoiceDetail:
    """Fields shown for one NFS-e (``InfNfse``)."""

    number: int
    issue_date: str  # raw text, not parsed
    service: Service
    provider: Party
    recipient: Party


@dataclass(frozen=True)
class Invoice:
    detail: InvoiceDetail


@dataclass(frozen=True)
class InvoiceEnvelope:
    invoice: Invoice


@dataclass(frozen=True)
class InvoiceResponse:
    envelopes: tuple[InvoiceEnvelope, ...] = ()

    def details(self) -> list[InvoiceDetail]:
        """Flatten envelopes into their InvoiceDetail records, in document order."""
        return [env.invoice.detail for env in self.envelopes]
