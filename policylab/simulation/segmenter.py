from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple
import re

# Ordered keyword families; the first match wins when a block mentions several.
CLAUSE_TYPE_RULES: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("LIABILITY", re.compile(r"liability|limitation of liability")),
    ("PAYMENT", re.compile(r"payment|fees|invoice")),
    ("TERMINATION", re.compile(r"termination|terminate")),
    ("CONFIDENTIALITY", re.compile(r"confidential|non-disclosure")),
    ("PRIVACY", re.compile(r"privacy|data protection|data processing")),
    ("GOVERNING_LAW", re.compile(r"governing law|jurisdiction|venue")),
)
UNKNOWN_CLAUSE_TYPE = "UNKNOWN"

_BLOCK_SPLIT_RX = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class ClauseCandidate:
    id: str
    clause_type: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "clauseType": self.clause_type, "text": self.text}


def infer_clause_type(text: str) -> str:
    normalized = text.lower()
    for clause_type, rx in CLAUSE_TYPE_RULES:
        if rx.search(normalized):
            return clause_type
    return UNKNOWN_CLAUSE_TYPE


def segment_clauses(contract_text: str) -> List[ClauseCandidate]:
    """
    Split contract text on blank-line boundaries into typed candidates.
    One block is one candidate: no merging and no re-splitting of long blocks.
    """
    blocks = [b.strip() for b in _BLOCK_SPLIT_RX.split(contract_text)]
    return [
        ClauseCandidate(id=f"clause-{i}", clause_type=infer_clause_type(text), text=text)
        for i, text in enumerate((b for b in blocks if b), start=1)
    ]
