from __future__ import annotations
import hashlib, json
from typing import Any
from slugify import slugify as _slugify

POLICY_SUFFIX = ".policy.dsl"
COMPILED_SUFFIX = ".compiled.json"

def slugify(s: str) -> str:
    return _slugify(s, lowercase=True, separator="-")

def _json_dumps_stable(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"))

def stable_hash(obj: Any, algo: str = "sha256") -> str:
    h = hashlib.new(algo)
    if hasattr(obj, "to_dict"):
        obj = obj.to_dict()
    h.update(_json_dumps_stable(obj).encode("utf-8"))
    return h.hexdigest()

def short_id(obj: Any, n: int = 10) -> str:
    return stable_hash(obj)[:n]

def policy_fingerprint(policy: Any, n: int = 12) -> str:
    """Hash of the compiled rules only; compiledAt does not take part."""
    rules = policy.to_dict()["rules"] if hasattr(policy, "to_dict") else policy["rules"]
    return short_id({"rules": rules}, n)

def compiled_output_name(source_file: str) -> str:
    """'vendor.policy.dsl' -> 'vendor.compiled.json'; other names keep their stem."""
    base = source_file[: -len(POLICY_SUFFIX)] if source_file.endswith(POLICY_SUFFIX) else source_file
    return f"{base}{COMPILED_SUFFIX}"

def policy_slug(policy_name: str) -> str:
    return slugify(policy_name) or "untitled-policy"
