"""Parsers for SEMrush semicolon-delimited responses.

All functions are pure: they take the raw text exactly as stored in the audit
trail and can be re-run later, e.g. when rendering a saved report. Empty,
``ERROR``-prefixed or header-only payloads degrade to ``None`` / ``[]``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from hostaudit.schemas.audit import (
    SEMrushBacklinks,
    SEMrushDomainRanks,
    SEMrushKeyword,
    SEMrushParsedData,
    SEMrushRefDomain,
)

logger = logging.getLogger(__name__)

DOMAIN_RANKS_COLUMNS = "Db,Dn,Rk,Or,Ot,Oc,Ad,At,Ac"
BACKLINKS_COLUMNS = "ascore,total,domains_num,urls_num,ips_num,follows_num,nofollows_num"
ORGANIC_COLUMNS = "Ph,Po,Pp,Nq,Cp,Tr,Tc,Ur"
REF_DOMAINS_COLUMNS = "domain_ascore,domain,backlinks_num,first_seen,last_seen"

_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _to_int(value: str) -> int:
    match = _INT_PREFIX.match(value)
    return int(match.group()) if match else 0


def _to_float(value: str) -> float:
    match = _FLOAT_PREFIX.match(value)
    return float(match.group()) if match else 0.0


def _to_optional_int(value: str) -> int | None:
    match = _INT_PREFIX.match(value)
    return int(match.group()) if match else None


def split_rows(text: str | None) -> list[list[str]]:
    """
    Split a SEMrush payload into data rows (header dropped).

    Returns an empty list for missing, error or header-only payloads.
    """
    if not text or text.startswith("ERROR"):
        if text:
            logger.warning(f"[SEMrush] Error payload: {text.strip()[:120]}")
        return []
    lines = text.strip().split("\n")
    if len(lines) < 2:
        return []
    return [line.rstrip("\r").split(";") for line in lines[1:]]


def parse_domain_ranks(text: str | None) -> SEMrushDomainRanks | None:
    """Parse ``domain_ranks`` (columns Db;Dn;Rk;Or;Ot;Oc;Ad;At;Ac)."""
    rows = split_rows(text)
    if not rows:
        return None
    values = rows[0] + [""] * (9 - len(rows[0]))
    return SEMrushDomainRanks(
        rank=_to_int(values[2]),
        organic_keywords=_to_int(values[3]),
        organic_traffic=_to_int(values[4]),
        organic_cost=_to_float(values[5]),
        adwords_keywords=_to_int(values[6]),
        adwords_traffic=_to_int(values[7]),
        adwords_cost=_to_float(values[8]),
    )


def parse_backlinks_overview(text: str | None) -> SEMrushBacklinks | None:
    """Parse ``backlinks_overview`` (ascore;total;domains_num;...)."""
    rows = split_rows(text)
    if not rows:
        return None
    values = rows[0] + [""] * (7 - len(rows[0]))
    return SEMrushBacklinks(
        authority_score=_to_int(values[0]),
        total_backlinks=_to_int(values[1]),
        referring_domains=_to_int(values[2]),
        referring_urls=_to_int(values[3]),
        referring_ips=_to_int(values[4]),
        follow_links=_to_int(values[5]),
        nofollow_links=_to_int(values[6]),
    )


def parse_organic_keywords(text: str | None) -> list[SEMrushKeyword]:
    """Parse ``domain_organic`` rows (Ph;Po;Pp;Nq;Cp;Tr;Tc;Ur)."""
    keywords: list[SEMrushKeyword] = []
    for values in split_rows(text):
        if len(values) < 7:
            continue
        keywords.append(
            SEMrushKeyword(
                keyword=values[0],
                position=_to_int(values[1]),
                previous_position=_to_optional_int(values[2]),
                search_volume=_to_int(values[3]),
                cpc=_to_float(values[4]),
                traffic_percent=_to_float(values[5]),
                traffic_cost=_to_float(values[6]),
                url=values[7] if len(values) > 7 else "",
            )
        )
    return keywords


def parse_ref_domains(text: str | None) -> list[SEMrushRefDomain]:
    """Parse ``backlinks_refdomains`` rows (domain_ascore;domain;backlinks_num;first_seen;last_seen)."""
    domains: list[SEMrushRefDomain] = []
    for values in split_rows(text):
        if len(values) < 5:
            continue
        domains.append(
            SEMrushRefDomain(
                domain=values[1],
                backlinks_count=_to_int(values[2]),
                first_seen=values[3],
                last_seen=values[4],
            )
        )
    return domains


def parse_semrush_response(raw: Mapping[str, Any]) -> SEMrushParsedData:
    """Parse a stored SEMrush raw response (the four text slots)."""

    def _text(key: str) -> str | None:
        value = raw.get(key)
        return value if isinstance(value, str) else None

    return SEMrushParsedData(
        domain_ranks=parse_domain_ranks(_text("domainRanks")),
        backlinks=parse_backlinks_overview(_text("backlinks")),
        top_keywords=parse_organic_keywords(_text("organicKeywords")),
        ref_domains=parse_ref_domains(_text("refDomains")),
    )
