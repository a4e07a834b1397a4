from __future__ import annotations

from policylab.compiler import compile_policy
from policylab.simulation import simulate_policy
from policylab.simulation.engine import SimulationResult, Violation
from policylab.templates import SAMPLE_CONTRACT_TEXT, SAMPLE_POLICY_DSL


def _policy(*rules: str, name: str = "T"):
    return compile_policy(f'POLICY "{name}"\n' + "\n".join(rules))


def _rule(rule_id: str, clause_type: str, severity: str, require: str | None = None, forbid: str | None = None) -> str:
    lines = [f"RULE {rule_id}", f"WHEN CLAUSE TYPE {clause_type}"]
    if require:
        lines.append(f"REQUIRE {require}")
    if forbid:
        lines.append(f"FORBID {forbid}")
    lines += [f"SEVERITY {severity}", f'REMEDIATION "fix {rule_id}"', "END"]
    return "\n".join(lines)


def test_p1_flags_unlimited_liability(p1_dsl):
    result = simulate_policy(compile_policy(p1_dsl), "Liability clause: liability is unlimited.")
    assert isinstance(result, SimulationResult)
    assert result.clauses_analyzed == 1
    assert len(result.violations) >= 1
    # REQUIRE fails (no "cap liability"); FORBID does not match "liability is unlimited"
    assert [v.reason for v in result.violations] == ["Required pattern missing: /cap liability/i"]
    # a single high finding scores 20, which stays under the review threshold
    assert result.risk_score == 20
    assert result.verdict == "safe"


def test_same_clause_can_fail_require_and_forbid():
    policy = _policy(_rule("cap", "LIABILITY", "critical", require="/capped at/i", forbid="/unlimited liability/i"))
    result = simulate_policy(policy, "Limitation of liability: unlimited liability for all claims.")
    assert [v.reason for v in result.violations] == [
        "Required pattern missing: /capped at/i",
        "Forbidden pattern present: /unlimited liability/i",
    ]
    assert all(v.rule_id == "cap" and v.severity == "critical" for v in result.violations)
    assert result.risk_score == 60
    assert result.verdict == "review"


def test_absent_type_with_require_emits_single_violation_and_skips_forbid():
    policy = _policy(_rule("priv", "PRIVACY", "high", require="/gdpr/i", forbid="/sell/i"))
    result = simulate_policy(policy, "Payment terms: invoices due in 30 days.")
    assert result.violations == (
        Violation(
            rule_id="priv",
            clause_type="PRIVACY",
            severity="high",
            reason="No clause found for required type PRIVACY",
            remediation="fix priv",
            clause_snippet="",
        ),
    )


def test_absent_type_with_forbid_only_is_silent():
    policy = _policy(_rule("priv", "PRIVACY", "critical", forbid="/sell your data/i"))
    result = simulate_policy(policy, "We sell your data. Fees apply.")
    assert result.violations == ()
    assert result.risk_score == 0
    assert result.verdict == "safe"


def test_every_matching_clause_is_checked_in_order():
    policy = _policy(_rule("net30", "PAYMENT", "low", require="/30 days/"))
    contract = "Invoice A due in 30 days.\n\nInvoice B due in 60 days.\n\nFees C due in 90 days."
    result = simulate_policy(policy, contract)
    assert result.clauses_analyzed == 3
    assert [v.clause_snippet for v in result.violations] == ["Invoice B due in 60 days.", "Fees C due in 90 days."]


def test_ordering_follows_rules_then_candidates_and_duplicate_ids_evaluate_twice():
    policy = _policy(
        _rule("dup", "PAYMENT", "info", forbid="/late/i"),
        _rule("liab", "LIABILITY", "medium", forbid="/unlimited/"),
        _rule("dup", "PAYMENT", "low", forbid="/fee/"),
    )
    contract = "Late fee on each invoice.\n\nLiability is unlimited.\n\nLate payment interest."
    result = simulate_policy(policy, contract)
    assert [(v.rule_id, v.severity) for v in result.violations] == [
        ("dup", "info"),
        ("dup", "info"),
        ("liab", "medium"),
        ("dup", "low"),
    ]
    assert result.risk_score == 2 + 2 + 12 + 6


def test_case_sensitivity_follows_flags():
    strict = _policy(_rule("s", "TERMINATION", "high", forbid="/Terminate for convenience/"))
    loose = _policy(_rule("s", "TERMINATION", "high", forbid="/Terminate for convenience/i"))
    text = "Either party may terminate for convenience."
    assert simulate_policy(strict, text).violations == ()
    assert len(simulate_policy(loose, text).violations) == 1


def test_snippet_is_truncated_to_220_chars():
    long_clause = "Fees " + "x" * 400
    policy = _policy(_rule("p", "PAYMENT", "low", require="/net 30/"))
    v = simulate_policy(policy, long_clause).violations[0]
    assert len(v.clause_snippet) == 223
    assert v.clause_snippet.endswith("...")
    assert v.clause_snippet[:220] == long_clause[:220]


def test_score_caps_at_100_and_high_risk():
    rules = [_rule(f"r{i}", "UNKNOWN", "critical", require="/never-present/") for i in range(5)]
    result = simulate_policy(_policy(*rules), "Plain words.")
    assert len(result.violations) == 5
    assert result.risk_score == 100
    assert result.verdict == "high-risk"


def test_empty_contract_text():
    policy = _policy(_rule("p", "PAYMENT", "medium", require="/x/"), _rule("q", "PAYMENT", "high", forbid="/y/"))
    result = simulate_policy(policy, "")
    assert result.clauses_analyzed == 0
    assert [v.rule_id for v in result.violations] == ["p"]
    assert result.verdict == "safe"


def test_sample_template_simulation():
    policy = compile_policy(SAMPLE_POLICY_DSL)
    result = simulate_policy(policy, SAMPLE_CONTRACT_TEXT)
    assert result.clauses_analyzed == 2
    reasons = [(v.rule_id, v.reason) for v in result.violations]
    assert reasons == [
        ("liability_cap", "Required pattern missing: /cap(?:ped)? liability/i"),
        ("privacy_transfer", "Forbidden pattern present: /share your data with partners|sell your data/i"),
    ]
    assert result.risk_score == 32
    assert result.verdict == "safe"


def test_to_dict_wire_shape(p1_dsl):
    d = simulate_policy(compile_policy(p1_dsl), "Liability clause: liability is unlimited.").to_dict()
    assert set(d) == {"clausesAnalyzed", "violations", "riskScore", "verdict"}
    assert set(d["violations"][0]) == {"ruleId", "clauseType", "severity", "reason", "remediation", "clauseSnippet"}
