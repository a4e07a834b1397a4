from __future__ import annotations
import argparse, sys

from policylab.config_model.model import load_config
from policylab.io.batch import run_batch
from policylab.utils.log import logger_from_config


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Compile every *.policy.dsl file into *.compiled.json")
    ap.add_argument("--config", default=None, help="Path to config.toml (default: $POLICYLAB_CFG or config/config.toml)")
    ap.add_argument("--input", default=None, help="Input directory (overrides [batch].input_dir)")
    ap.add_argument("--output", default=None, help="Output directory (overrides [batch].output_dir)")
    ap.add_argument("--pattern", default=None, help="Glob for policy files (overrides [batch].pattern)")
    ap.add_argument("--strict", action="store_true", help="Exit non-zero when any file fails to compile")
    args = ap.parse_args(argv)

    cfg = load_config(args.config)
    log = logger_from_config(cfg, "policylab.batch")

    summary = run_batch(
        args.input or cfg.batch.input_dir,
        args.output or cfg.batch.output_dir,
        pattern=args.pattern or cfg.batch.pattern,
        logger=log,
    )
    for item in summary.items:
        status = "ok" if item.ok else f"FAILED ({item.message})"
        print(f"  {item.source_file} -> {item.output_path}: {status}")
    print(f"[policylab/compile] processed {summary.processed} file(s), {summary.failed} failed")

    return 1 if (args.strict and summary.failed) else 0


if __name__ == "__main__":
    sys.exit(main())
