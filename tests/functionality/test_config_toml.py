"""
Tests for Config Persistence (TOML).

Verifies that:
1. MigrationConfig.load() picks up [tool.ember_migrator] from pyproject.toml.
2. CLI arguments override TOML settings.
3. Relative paths are resolved against the TOML location.
4. File traversal finds toml in parent directories.
"""

import pytest

from ember_migrator.config import MigrationConfig
from ember_migrator.enums import NamespacePolicy, QuoteStyle


@pytest.fixture
def toml_file(tmp_path):
  """Creates a dummy pyproject.toml in the temp dir."""
  fpath = tmp_path / "pyproject.toml"
  content = """
[tool.ember_migrator]
namespace_policy = "always_keep"
quote = "double"
import_wrap_width = 80
include = ["app", "addon"]
mappings_path = "config/mappings.json"
namespaces = ["computed", "inject", "run", "computed"]
"""
  fpath.write_text(content, encoding="utf-8")
  return fpath


def test_defaults_without_toml(tmp_path):
  config = MigrationConfig.load(search_path=tmp_path)
  assert config.global_name == "Ember"
  assert config.namespace_policy == NamespacePolicy.KEEP_IF_CALLED
  assert config.quote == QuoteStyle.SINGLE
  assert config.include == ["app"]
  assert config.require_ember_app is True


def test_load_defaults_from_toml(tmp_path, toml_file):
  config = MigrationConfig.load(search_path=tmp_path)

  assert config.namespace_policy == NamespacePolicy.ALWAYS_KEEP
  assert config.quote == QuoteStyle.DOUBLE
  assert config.quote.char == '"'
  assert config.import_wrap_width == 80
  assert config.include == ["app", "addon"]
  assert config.namespaces == ["computed", "inject", "run"]
  assert config.mappings_path == (tmp_path / "config" / "mappings.json").resolve()


def test_cli_overrides_toml(tmp_path, toml_file):
  config = MigrationConfig.load(
    namespace_policy="keep_if_called",
    include=["lib"],
    require_ember_app=False,
    search_path=tmp_path,
  )

  assert config.namespace_policy == NamespacePolicy.KEEP_IF_CALLED
  assert config.include == ["lib"]
  assert config.require_ember_app is False
  assert config.quote == QuoteStyle.DOUBLE  # TOML fallback


def test_toml_found_in_parent(tmp_path, toml_file):
  nested = tmp_path / "app" / "components"
  nested.mkdir(parents=True)
  config = MigrationConfig.load(search_path=nested)
  assert config.import_wrap_width == 80


def test_invalid_values_raise_value_error(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.ember_migrator]\nglobal_name = "Ember.Foo"\n', encoding="utf-8")
  with pytest.raises(ValueError):
    MigrationConfig.load(search_path=tmp_path)


def test_invalid_policy_override(tmp_path):
  with pytest.raises(ValueError):
    MigrationConfig.load(namespace_policy="sometimes", search_path=tmp_path)


def test_wrap_width_must_be_positive():
  with pytest.raises(ValueError):
    MigrationConfig(import_wrap_width=0)


def test_broken_toml_is_ignored(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[tool.ember_migrator\n", encoding="utf-8")
  config = MigrationConfig.load(search_path=tmp_path)
  assert config.quote == QuoteStyle.SINGLE
