"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A captured rich console so tests can assert on CLI output.
- Fixture loading for the end-to-end JavaScript samples.
"""

import sys
import pytest
from io import StringIO
from pathlib import Path

from rich.console import Console

# Add src to path so we can import 'ember_migrator' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def captured_console():
  """
  Routes all console and logging output into a buffer for the duration of a test.

  Yields:
      StringIO: The buffer holding the rendered output.
  """
  from ember_migrator.utils.console import reset_console, set_console

  buffer = StringIO()
  set_console(Console(file=buffer, force_terminal=False, width=200))
  yield buffer
  reset_console()


@pytest.fixture
def load_fixture():
  """Returns a loader for ``tests/fixtures/<name>.js``."""

  def _load(name: str) -> str:
    return (FIXTURES_DIR / f"{name}.js").read_text(encoding="utf-8")

  return _load


@pytest.fixture
def ember_app(tmp_path):
  """
  Creates a minimal ember-cli project layout.

  Returns:
      Path: Project root with ``package.json`` and an empty ``app/`` directory.
  """
  (tmp_path / "package.json").write_text(
    '{"name": "my-app", "devDependencies": {"ember-cli": "~2.16.0"}}',
    encoding="utf-8",
  )
  (tmp_path / "app").mkdir()
  return tmp_path
