from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Tuple

from .patterns import compile_pattern

Severity = Literal["critical", "high", "medium", "low", "info"]

SEVERITIES: Tuple[str, ...] = ("critical", "high", "medium", "low", "info")
DEFAULT_POLICY_NAME = "Untitled Policy"
DEFAULT_REMEDIATION = "Update clause to satisfy policy controls."


# ---- parse-time accumulator ----

@dataclass
class RuleBuilder:
    """Mutable state for one RULE ... END block; lives only while the block is open."""
    id: str
    clause_type: Optional[str] = None
    require_pattern: Optional[str] = None
    require_flags: Optional[str] = None
    forbid_pattern: Optional[str] = None
    forbid_flags: Optional[str] = None
    severity: Optional[str] = None
    remediation: Optional[str] = None


# ---- compiled representation ----

@dataclass(frozen=True)
class CompiledRule:
    id: str
    clause_type: str
    require_pattern: Optional[str]
    require_flags: Optional[str]
    forbid_pattern: Optional[str]
    forbid_flags: Optional[str]
    severity: Severity
    remediation: str = DEFAULT_REMEDIATION

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "clauseType": self.clause_type,
            "requirePattern": self.require_pattern,
            "requireFlags": self.require_flags,
            "forbidPattern": self.forbid_pattern,
            "forbidFlags": self.forbid_flags,
            "severity": self.severity,
            "remediation": self.remediation,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "CompiledRule":
        """
        Rebuild a rule from its wire shape, re-checking the invariants the
        compiler enforces at END so the result is always simulatable.
        """
        if not isinstance(d, dict):
            raise ValueError("rule must be an object")
        rule_id = str(d.get("id") or "")
        if not rule_id:
            raise ValueError("rule id is required")
        clause_type = str(d.get("clauseType") or "").upper()
        if not clause_type:
            raise ValueError(f"RULE {rule_id} missing clauseType")
        severity = str(d.get("severity") or "").lower()
        if severity not in SEVERITIES:
            raise ValueError(f"RULE {rule_id} has invalid severity {severity}")

        for key in ("requirePattern", "requireFlags", "forbidPattern", "forbidFlags", "remediation"):
            if d.get(key) is not None and not isinstance(d[key], str):
                raise ValueError(f"RULE {rule_id} field {key} must be a string")

        require_pattern = d.get("requirePattern") or None
        forbid_pattern = d.get("forbidPattern") or None
        if require_pattern is None and forbid_pattern is None:
            raise ValueError(f"RULE {rule_id} needs requirePattern and/or forbidPattern")
        require_flags = d.get("requireFlags") if require_pattern is not None else None
        forbid_flags = d.get("forbidFlags") if forbid_pattern is not None else None
        for pattern, flags in ((require_pattern, require_flags), (forbid_pattern, forbid_flags)):
            if pattern is not None:
                compile_pattern(str(pattern), flags)

        return cls(
            id=rule_id,
            clause_type=clause_type,
            require_pattern=None if require_pattern is None else str(require_pattern),
            require_flags=None if require_pattern is None else str(require_flags or ""),
            forbid_pattern=None if forbid_pattern is None else str(forbid_pattern),
            forbid_flags=None if forbid_pattern is None else str(forbid_flags or ""),
            severity=severity,  # type: ignore[arg-type]
            # an explicit "" survives the round trip; only a missing value defaults
            remediation=DEFAULT_REMEDIATION if d.get("remediation") is None else d["remediation"],
        )


@dataclass(frozen=True)
class CompiledPolicy:
    policy_name: str
    compiled_at: str
    rules: Tuple[CompiledRule, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "policyName": self.policy_name,
            "compiledAt": self.compiled_at,
            "rules": [r.to_dict() for r in self.rules],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "CompiledPolicy":
        if not isinstance(d, dict):
            raise ValueError("compiled policy must be an object")
        raw_rules = d.get("rules") or []
        if not isinstance(raw_rules, list) or not raw_rules:
            raise ValueError("compiled policy has no rules")
        return cls(
            policy_name=str(d.get("policyName") or DEFAULT_POLICY_NAME),
            compiled_at=str(d.get("compiledAt") or ""),
            rules=tuple(CompiledRule.from_dict(r) for r in raw_rules),
        )
