from __future__ import annotations
import argparse, json, sys
from pathlib import Path

from policylab.compiler import CompileError, compile_policy
from policylab.io.writers import write_frame, write_json, write_text
from policylab.simulation import (
    build_narrative,
    build_simulation_report,
    simulate_policy,
    violations_frame,
)
from policylab.utils.ids import policy_slug


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Compile a policy and simulate it against a contract")
    ap.add_argument("policy", help="Path to a .policy.dsl file")
    ap.add_argument("contract", help="Path to a plain-text contract")
    ap.add_argument("--out-dir", default=None, help="Write report.json, violations.csv and narrative.md here")
    args = ap.parse_args(argv)

    dsl_text = Path(args.policy).read_text(encoding="utf-8")
    contract_text = Path(args.contract).read_text(encoding="utf-8")

    try:
        policy = compile_policy(dsl_text)
    except CompileError as e:
        print(f"DSL_COMPILE_ERROR: {e}", file=sys.stderr)
        return 2

    result = simulate_policy(policy, contract_text)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

    if args.out_dir:
        base = Path(args.out_dir) / policy_slug(policy.policy_name)
        write_json(base / "report.json", build_simulation_report(policy, result))
        write_frame(violations_frame(result), base / "violations.csv")
        write_text(base / "narrative.md", build_narrative(policy, result))
        print(f"\nreports written to {base}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
