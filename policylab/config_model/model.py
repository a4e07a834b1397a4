from __future__ import annotations
from typing import List, Optional
from pathlib import Path
import os
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    model_validator,
)


# ---------- Leaf models ----------

class EnvCfg(BaseModel):
    project_name: str = "policylab"
    timezone: str = "UTC"


class LoggingCfg(BaseModel):
    level: str = "INFO"
    structured_json: bool = True


class BatchCfg(BaseModel):
    input_dir: str = "input"
    output_dir: str = "output"
    pattern: str = "*.policy.dsl"


class ApiCfg(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(4014, ge=1, le=65535)
    cors_origins: List[str] = ["*"]
    max_dsl_chars: int = Field(100_000, gt=0)
    max_contract_chars: int = Field(1_000_000, gt=0)


# ---------- Root ----------

class RootCfg(BaseModel):
    model_config = ConfigDict(extra="ignore")

    env: EnvCfg = EnvCfg()
    logging: LoggingCfg = LoggingCfg()
    batch: BatchCfg = BatchCfg()
    api: ApiCfg = ApiCfg()

    # Private attribute (not a field); used only to resolve relative paths
    _config_dir: Optional[Path] = PrivateAttr(default=None)

    @model_validator(mode="after")
    def _normalize_paths(self):
        if self._config_dir:
            # A file inside a conventional "config" folder resolves against the
            # project root (its parent); otherwise against the file's own directory.
            base_dir = self._config_dir.parent if self._config_dir.name.lower() == "config" else self._config_dir

            def _abs(p: str) -> str:
                pp = Path(p)
                return str(pp if pp.is_absolute() else (base_dir / pp).resolve())

            self.batch.input_dir = _abs(self.batch.input_dir)
            self.batch.output_dir = _abs(self.batch.output_dir)
        return self

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str]) -> "RootCfg":
        try:
            import tomllib  # py>=3.11
        except ImportError:
            import tomli as tomllib

        p = Path(path)
        try:
            with p.open("rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError:
            # Retry with BOM / zero-width characters stripped (common editor artifacts)
            text = p.read_text(encoding="utf-8-sig", errors="replace")
            cleaned = text.strip().lstrip("\ufeff\u200b\u200c\u200d\u2060")
            try:
                raw = tomllib.loads(cleaned)
            except tomllib.TOMLDecodeError as e:
                snippet = cleaned[:80].replace("\n", "\\n")
                raise RuntimeError(
                    f"Failed to parse TOML at {p} after BOM/cleanup. "
                    f"First chars: {snippet!r}"
                ) from e

        cfg = cls(
            env=EnvCfg(**raw.get("env", {})),
            logging=LoggingCfg(**raw.get("logging", {})),
            batch=BatchCfg(**raw.get("batch", {})),
            api=ApiCfg(**raw.get("api", {})),
        )
        cfg._config_dir = p.parent.resolve()
        return cfg._normalize_paths()

    @classmethod
    def load(cls, path: str | None = None) -> "RootCfg":
        final = Path(path or os.environ.get("POLICYLAB_CFG", "config/config.toml")).resolve()
        # no explicit path and no env override: a missing default file means defaults
        if path is None and "POLICYLAB_CFG" not in os.environ and not final.exists():
            return cls()
        return cls.from_toml(final)


def load_config(path: str | None = None) -> RootCfg:
    return RootCfg.load(path)
