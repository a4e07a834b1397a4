from __future__ import annotations
import argparse

import uvicorn

from policylab.api.app import create_app
from policylab.config_model.model import load_config


def main() -> None:
    ap = argparse.ArgumentParser(description="Serve the policylab HTTP API")
    ap.add_argument("--config", default=None)
    ap.add_argument("--host", default=None)
    ap.add_argument("--port", type=int, default=None)
    args = ap.parse_args()

    cfg = load_config(args.config)
    uvicorn.run(create_app(cfg), host=args.host or cfg.api.host, port=args.port or cfg.api.port)


if __name__ == "__main__":
    main()
