from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple
import re

from ..utils.time import now_iso
from .model import (
    CompiledPolicy,
    CompiledRule,
    RuleBuilder,
    SEVERITIES,
    DEFAULT_POLICY_NAME,
    DEFAULT_REMEDIATION,
)
from .patterns import split_literal, flags_to_re, UnsupportedFlagError

# =============================================================================
# Errors
# =============================================================================

class CompileError(ValueError):
    """A fatal DSL diagnostic. str(err) is always 'Line N: <reason>'."""

    def __init__(self, line: int, reason: str) -> None:
        super().__init__(f"Line {line}: {reason}")
        self.line = line
        self.reason = reason

# =============================================================================
# Parse state (threaded through the fold over source lines)
# =============================================================================

@dataclass(frozen=True)
class _ParseState:
    policy_name: Optional[str] = None
    current: Optional[RuleBuilder] = None
    rules: Tuple[CompiledRule, ...] = ()

_LINE_SPLIT_RX = re.compile(r"\r?\n")

def _keyword_arg(line: str, keyword: str) -> Optional[str]:
    """Argument text after `keyword`, '' for a bare keyword, None if the line is another statement."""
    if line == keyword:
        return ""
    if line.startswith(keyword + " "):
        return line[len(keyword) + 1:].strip()
    return None

# =============================================================================
# Value parsers
# =============================================================================

_QUOTED_RX = re.compile(r'^"(.*)"$', re.S)

def _parse_quoted(raw: str, line_no: int) -> str:
    m = _QUOTED_RX.match(raw)
    if not m:
        raise CompileError(line_no, "expected quoted string")
    return m.group(1)

def _parse_regex_literal(raw: str, line_no: int) -> Tuple[str, str]:
    parts = split_literal(raw)
    if parts is None:
        raise CompileError(line_no, "expected regex literal like /pattern/i")
    pattern, flags = parts
    try:
        bits = flags_to_re(flags)
        re.compile(pattern, bits)
    except UnsupportedFlagError as e:
        raise CompileError(line_no, f"unsupported regex flag {e.flag!r} in {raw}") from e
    except (ValueError, re.error) as e:
        raise CompileError(line_no, f"invalid regex literal {raw}") from e
    return pattern, flags

def _parse_severity(raw: str, line_no: int) -> str:
    sev = raw.strip().lower()
    if sev not in SEVERITIES:
        raise CompileError(line_no, f"invalid severity {sev}")
    return sev

# =============================================================================
# Rule-body statements
# =============================================================================

def _duplicate(b: RuleBuilder, keyword: str, line_no: int) -> CompileError:
    return CompileError(line_no, f"duplicate {keyword} in RULE {b.id}")

def _on_when(b: RuleBuilder, arg: str, line_no: int) -> RuleBuilder:
    if b.clause_type is not None:
        raise _duplicate(b, "WHEN CLAUSE TYPE", line_no)
    if not arg:
        raise CompileError(line_no, "WHEN CLAUSE TYPE requires value")
    return replace(b, clause_type=arg.upper())

def _on_require(b: RuleBuilder, arg: str, line_no: int) -> RuleBuilder:
    if b.require_pattern is not None:
        raise _duplicate(b, "REQUIRE", line_no)
    pattern, flags = _parse_regex_literal(arg, line_no)
    return replace(b, require_pattern=pattern, require_flags=flags)

def _on_forbid(b: RuleBuilder, arg: str, line_no: int) -> RuleBuilder:
    if b.forbid_pattern is not None:
        raise _duplicate(b, "FORBID", line_no)
    pattern, flags = _parse_regex_literal(arg, line_no)
    return replace(b, forbid_pattern=pattern, forbid_flags=flags)

def _on_severity(b: RuleBuilder, arg: str, line_no: int) -> RuleBuilder:
    if b.severity is not None:
        raise _duplicate(b, "SEVERITY", line_no)
    return replace(b, severity=_parse_severity(arg, line_no))

def _on_remediation(b: RuleBuilder, arg: str, line_no: int) -> RuleBuilder:
    if b.remediation is not None:
        raise _duplicate(b, "REMEDIATION", line_no)
    return replace(b, remediation=_parse_quoted(arg, line_no))

_RULE_STATEMENTS: Tuple[Tuple[str, Callable[[RuleBuilder, str, int], RuleBuilder]], ...] = (
    ("WHEN CLAUSE TYPE", _on_when),
    ("REQUIRE", _on_require),
    ("FORBID", _on_forbid),
    ("SEVERITY", _on_severity),
    ("REMEDIATION", _on_remediation),
)

def _finalize(b: RuleBuilder, line_no: int) -> CompiledRule:
    if not b.clause_type:
        raise CompileError(line_no, f"RULE {b.id} missing WHEN CLAUSE TYPE ...")
    if b.require_pattern is None and b.forbid_pattern is None:
        raise CompileError(line_no, f"RULE {b.id} needs REQUIRE and/or FORBID")
    if not b.severity:
        raise CompileError(line_no, f"RULE {b.id} missing SEVERITY")
    return CompiledRule(
        id=b.id,
        clause_type=b.clause_type,
        require_pattern=b.require_pattern,
        require_flags=b.require_flags,
        forbid_pattern=b.forbid_pattern,
        forbid_flags=b.forbid_flags,
        severity=b.severity,  # type: ignore[arg-type]
        remediation=b.remediation if b.remediation is not None else DEFAULT_REMEDIATION,
    )

# =============================================================================
# Fold step
# =============================================================================

def _step(state: _ParseState, line_no: int, raw: str) -> _ParseState:
    line = raw.strip()
    if not line or line.startswith("#"):
        return state

    arg = _keyword_arg(line, "POLICY")
    if arg is not None:
        if state.policy_name is not None:
            raise CompileError(line_no, "POLICY declared more than once")
        return replace(state, policy_name=_parse_quoted(arg, line_no))

    arg = _keyword_arg(line, "RULE")
    if arg is not None:
        if state.current is not None:
            raise CompileError(line_no, f"previous RULE {state.current.id} not closed with END")
        if not arg:
            raise CompileError(line_no, "RULE requires an identifier")
        return replace(state, current=RuleBuilder(id=arg))

    cur = state.current
    if cur is None:
        raise CompileError(line_no, "statement outside RULE block")

    for keyword, handler in _RULE_STATEMENTS:
        arg = _keyword_arg(line, keyword)
        if arg is not None:
            return replace(state, current=handler(cur, arg, line_no))

    if line == "END":
        return replace(state, current=None, rules=state.rules + (_finalize(cur, line_no),))

    raise CompileError(line_no, f"unsupported statement '{line}'")

# =============================================================================
# Public API
# =============================================================================

def compile_policy(dsl_text: str) -> CompiledPolicy:
    """
    Compile policy DSL text into an immutable CompiledPolicy.

    Statements (one per line; blank lines and '#' comments skipped):
      POLICY "<name>"
      RULE <id>
        WHEN CLAUSE TYPE <TYPE>
        REQUIRE /<regex>/<flags>
        FORBID /<regex>/<flags>
        SEVERITY <critical|high|medium|low|info>
        REMEDIATION "<text>"
      END

    Any grammar or validation problem raises CompileError ('Line N: ...');
    nothing is returned for partially valid input.
    """
    lines = _LINE_SPLIT_RX.split(dsl_text)
    state = _ParseState()
    for idx, raw in enumerate(lines):
        state = _step(state, idx + 1, raw)

    last_line = len(lines)
    if state.current is not None:
        raise CompileError(last_line, f"Unclosed RULE {state.current.id}; expected END")
    if not state.rules:
        raise CompileError(last_line, "No rules compiled from DSL")

    return CompiledPolicy(
        policy_name=state.policy_name if state.policy_name is not None else DEFAULT_POLICY_NAME,
        compiled_at=now_iso(),
        rules=state.rules,
    )
