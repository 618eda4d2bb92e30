from __future__ import annotations

from decimal import Decimal

from leitor_nfse.models.nfse import TaxId


def format_brl(value: Decimal | str) -> str:
    """Format a numeric value as R$ X.XXX,XX."""
    d = Decimal(value)
    formatted = f"{d:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {formatted}"


def format_cnpj(value: str) -> str:
    """Format a 14-digit CNPJ as XX.XXX.XXX/XXXX-XX; anything else is returned unchanged."""
    if len(value) != 14 or not value.isdigit():
        return value
    return f"{value[:2]}.{value[2:5]}.{value[5:8]}/{value[8:12]}-{value[12:]}"


def format_cpf(value: str) -> str:
    """Format an 11-digit CPF as XXX.XXX.XXX-XX; anything else is returned unchanged."""
    if len(value) != 11 or not value.isdigit():
        return value
    return f"{value[:3]}.{value[3:6]}.{value[6:9]}-{value[9:]}"


def format_tax_id(tax_id: TaxId) -> str:
    """One-line label for a TaxId, showing whichever identifiers are present."""
    parts = []
    if tax_id.cnpj is not None:
        parts.append(f"CNPJ {format_cnpj(tax_id.cnpj)}")
    if tax_id.cpf is not None:
        parts.append(f"CPF {format_cpf(tax_id.cpf)}")
    return " / ".join(parts) if parts else "-"
