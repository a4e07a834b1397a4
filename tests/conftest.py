from pathlib import Path
import pytest

P1_DSL = """POLICY "P1"
RULE r1
WHEN CLAUSE TYPE LIABILITY
REQUIRE /cap liability/i
FORBID /unlimited liability/i
SEVERITY high
REMEDIATION "Add a cap"
END"""

@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]

@pytest.fixture(scope="session")
def cfg_path(project_root: Path) -> Path:
    return project_root / "config" / "config.toml"

@pytest.fixture(scope="session")
def cfg(cfg_path: Path):
    from policylab.config_model.model import load_config
    return load_config(str(cfg_path))

@pytest.fixture
def p1_dsl() -> str:
    return P1_DSL

@pytest.fixture
def tmp_out(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir(parents=True, exist_ok=True)
    return d
