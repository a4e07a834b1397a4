from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from ..compiler import CompileError, compile_policy
from ..utils.ids import compiled_output_name, policy_fingerprint
from ..utils.log import get_logger
from ..utils.time import now_iso
from .writers import write_json

@dataclass(frozen=True)
class BatchItem:
    source_file: str
    output_path: str
    ok: bool
    message: Optional[str] = None

@dataclass(frozen=True)
class BatchSummary:
    input_dir: str
    output_dir: str
    items: List[BatchItem] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.items)

    @property
    def failed(self) -> int:
        return sum(1 for i in self.items if not i.ok)

def compile_envelope(source_file: str, dsl_text: str) -> Dict[str, Any]:
    """
    The JSON document written per policy file. Compile failures become
    ok=False with the line-numbered diagnostic; they are never dropped.
    """
    try:
        policy = compile_policy(dsl_text)
    except CompileError as e:
        return {
            "sourceFile": source_file,
            "compiledAt": now_iso(),
            "ok": False,
            "payload": {"error": "DSL_COMPILE_ERROR", "message": str(e)},
        }
    return {
        "sourceFile": source_file,
        "compiledAt": now_iso(),
        "ok": True,
        "payload": {
            "compiledPolicy": policy.to_dict(),
            "fingerprint": policy_fingerprint(policy),
        },
    }

def run_batch(
    input_dir: str | Path,
    output_dir: str | Path,
    *,
    pattern: str = "*.policy.dsl",
    logger: Optional[logging.Logger] = None,
) -> BatchSummary:
    """
    Compile every policy file under `input_dir` (non-recursive, sorted by name)
    into `<stem>.compiled.json` under `output_dir`.
    """
    log = logger or get_logger("policylab.batch")
    src = Path(input_dir)
    dst = Path(output_dir)
    src.mkdir(parents=True, exist_ok=True)
    dst.mkdir(parents=True, exist_ok=True)

    items: List[BatchItem] = []
    for path in sorted(p for p in src.glob(pattern) if p.is_file()):
        # undecodable bytes become U+FFFD
        dsl_text = path.read_text(encoding="utf-8", errors="replace")
        envelope = compile_envelope(path.name, dsl_text)
        out_path = write_json(dst / compiled_output_name(path.name), envelope)

        message = None if envelope["ok"] else envelope["payload"]["message"]
        if envelope["ok"]:
            log.info("compiled policy file", extra={"source_file": path.name, "output": str(out_path)})
        else:
            log.warning("policy compile failed", extra={"source_file": path.name, "error": message})
        items.append(BatchItem(source_file=path.name, output_path=str(out_path), ok=bool(envelope["ok"]), message=message))

    summary = BatchSummary(input_dir=str(src), output_dir=str(dst), items=items)
    log.info(
        f"processed {summary.processed} file(s)",
        extra={"processed": summary.processed, "failed": summary.failed},
    )
    return summary
