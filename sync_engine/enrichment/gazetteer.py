"""
Region inference from free-text delivery addresses.
"""

from typing import Optional, Tuple

# First match wins: every name precedes the shorter names it contains.
# Accented and unaccented spellings are both listed; nothing is stripped.
KNOWN_REGIONS: Tuple[str, ...] = (
    "AGUAS CLARAS",
    "ASA SUL",
    "ASA NORTE",
    "ARNIQUEIRA",
    "BRAZLANDIA",
    "CANDANGOLANDIA",
    "CEILANDIA",
    "CRUZEIRO NOVO",
    "CRUZEIRO VELHO",
    "CRUZEIRO",
    "ESTRUTURAL",
    "FERCAL",
    "GAMA",
    "GUARA",
    "ITAPOA",
    "JARDIM BOTANICO",
    "JARDIM BOTÂNICO",
    "LAGO NORTE",
    "LAGO SUL",
    "NUCLEO BANDEIRANTE",
    "PARANOA",
    "PARANOÁ",
    "PARK WAY",
    "PARK SUL",
    "PLANALTINA",
    "RECANTO DAS EMAS",
    "RIACHO FUNDO II",
    "RIACHO FUNDO I",
    "RIACHO FUNDO",
    "SAMAMBAIA",
    "SANTA MARIA",
    "SAO SEBASTIAO",
    "SÃO SEBASTIÃO",
    "SCIA",
    "SIA",
    "SOL NASCENTE",
    "SOBRADINHO II",
    "SOBRADINHO",
    "SUDOESTE",
    "TAGUATINGA",
    "VARJAO",
    "VARJÃO",
    "VICENTE PIRES",
    "OCTOGONAL",
    "SETOR O",
    "NOROESTE",
    "SETOR MILITAR URBANO",
    "LAGO",
)


def match_region(address: Optional[str]) -> Optional[str]:
    """
    Return the first known region contained in the address.

    Matching is a case-insensitive substring test against KNOWN_REGIONS in
    list order. Empty addresses and addresses naming no known region give None.
    """
    if not address:
        return None

    upper = address.upper()
    for region in KNOWN_REGIONS:
        if region in upper:
            return region
    return None
