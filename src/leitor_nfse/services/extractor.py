"""Read an NFS-e XML file into an InvoiceResponse.

Elements are matched by local name, so documents with or without the ABRASF
namespace decode the same way. Unknown elements are ignored; missing or
repeated mandatory elements fail the whole document.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path

from lxml import etree

from leitor_nfse.models import nfse
from leitor_nfse.models.nfse import (
    Invoice,
    InvoiceDetail,
    InvoiceEnvelope,
    InvoiceResponse,
    Party,
    Service,
    TaxId,
)
from leitor_nfse.services.exceptions import DecodeError, OpenError, ReadError

logger = logging.getLogger(__name__)

BOM = "\ufeff"
_U32_MAX = 2**32 - 1
_DIGITS = re.compile(r"[0-9]+")
_DECIMAL = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


class _Mismatch(Exception):
    """Document does not fit the model; converted to DecodeError by parse_text."""


def _make_parser() -> etree.XMLParser:
    # Text is already decoded, so the declared encoding must be ignored.
    return etree.XMLParser(
        encoding="utf-8",
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )


def _localname(el: etree._Element) -> str | None:
    if not isinstance(el.tag, str):
        return None
    return etree.QName(el).localname


def _where(el: etree._Element) -> str:
    parts = []
    node: etree._Element | None = el
    while node is not None:
        parts.append(_localname(node) or "?")
        node = node.getparent()
    return "/".join(reversed(parts))


def _children(el: etree._Element, name: str) -> list[etree._Element]:
    return [child for child in el if _localname(child) == name]


def _optional(el: etree._Element, name: str) -> etree._Element | None:
    found = _children(el, name)
    if len(found) > 1:
        raise _Mismatch(f"campo duplicado `{name}` em {_where(el)}")
    return found[0] if found else None


def _required(el: etree._Element, name: str) -> etree._Element:
    found = _optional(el, name)
    if found is None:
        raise _Mismatch(f"campo obrigatório ausente `{name}` em {_where(el)}")
    return found


def _text(el: etree._Element) -> str:
    for child in el:
        if isinstance(child, etree._Entity):
            raise _Mismatch(f"entidade `&{child.name};` não suportada em {_where(el)}")
        if _localname(child):
            raise _Mismatch(f"esperado texto em {_where(el)}, encontrado elemento")
    return (el.text or "").strip()


def _required_text(el: etree._Element, name: str) -> str:
    return _text(_required(el, name))


def _optional_text(el: etree._Element, name: str) -> str | None:
    found = _optional(el, name)
    return _text(found) if found is not None else None


def _decode_number(el: etree._Element) -> int:
    field = _required(el, nfse.NUMERO)
    raw = _text(field)
    if not _DIGITS.fullmatch(raw) or int(raw) > _U32_MAX:
        raise _Mismatch(f"valor inválido `{raw}` em {_where(field)}: esperado inteiro sem sinal")
    return int(raw)


def _decode_amount(el: etree._Element) -> Decimal:
    field = _required(_required(el, nfse.VALORES), nfse.VALOR_SERVICOS)
    raw = _text(field)
    try:
        if not _DECIMAL.fullmatch(raw):
            raise InvalidOperation
        value = Decimal(raw)
        if not value.is_finite():
            raise InvalidOperation
    except InvalidOperation:
        raise _Mismatch(
            f"valor inválido `{raw}` em {_where(field)}: esperado número decimal"
        ) from None
    return value


def _decode_tax_id(el: etree._Element) -> TaxId:
    return TaxId(cnpj=_optional_text(el, nfse.CNPJ), cpf=_optional_text(el, nfse.CPF))


def _decode_party(el: etree._Element, id_container: str) -> Party:
    ident = _required(el, id_container)
    if id_container == nfse.ID_TOMADOR:
        tax_el = _required(ident, nfse.CPF_CNPJ)
    else:
        # ABRASF 2.x wraps the provider id in CpfCnpj; 1.0 does not.
        tax_el = _optional(ident, nfse.CPF_CNPJ)
        if tax_el is None:
            tax_el = ident
    return Party(
        legal_name=_required_text(el, nfse.RAZAO_SOCIAL),
        tax_id=_decode_tax_id(tax_el),
    )


def _decode_detail(el: etree._Element) -> InvoiceDetail:
    servico = _required(el, nfse.SERVICO)
    return InvoiceDetail(
        number=_decode_number(el),
        issue_date=_required_text(el, nfse.DATA_EMISSAO),
        service=Service(
            amount=_decode_amount(servico),
            description=_required_text(servico, nfse.DISCRIMINACAO),
        ),
        provider=_decode_party(_required(el, nfse.PRESTADOR), nfse.ID_PRESTADOR),
        recipient=_decode_party(_required(el, nfse.TOMADOR), nfse.ID_TOMADOR),
    )


def _decode_response(root: etree._Element) -> InvoiceResponse:
    if _localname(root) != nfse.ROOT:
        raise _Mismatch(f"elemento raiz inesperado `{_localname(root)}`, esperado `{nfse.ROOT}`")
    lista = _required(root, nfse.LISTA_NFSE)
    envelopes = []
    for comp in _children(lista, nfse.COMP_NFSE):
        inf = _required(_required(comp, nfse.NFSE), nfse.INF_NFSE)
        envelopes.append(InvoiceEnvelope(invoice=Invoice(detail=_decode_detail(inf))))
    return InvoiceResponse(envelopes=tuple(envelopes))


def parse_text(text: str, path: Path | str | None = None) -> InvoiceResponse:
    """Decode already-read XML text. A single leading BOM is stripped.

    Raises DecodeError for malformed XML or content that does not match the model.
    """
    if text.startswith(BOM):
        text = text[1:]
    try:
        root = etree.fromstring(text.encode("utf-8"), _make_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        raise DecodeError(path, str(e) or "documento XML vazio ou inválido") from e
    try:
        return _decode_response(root)
    except _Mismatch as e:
        raise DecodeError(path, str(e)) from e


def parse(file_path: Path | str) -> InvoiceResponse:
    """Open, read and decode one NFS-e XML file.

    Every call re-reads the file. Raises OpenError, ReadError or DecodeError.
    """
    path = Path(file_path)
    logger.debug("Parsing %s", path)
    if path.exists() and not path.is_file() and not path.is_dir():
        raise OpenError(path, "não é um arquivo regular")
    try:
        f = path.open(encoding="utf-8")
    except OSError as e:
        raise OpenError(path, e.strerror or str(e)) from e
    with f:
        try:
            text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(path, str(e)) from e
    response = parse_text(text, path)
    logger.debug("Parsed %s: %d NFS-e", path, len(response.envelopes))
    return response
