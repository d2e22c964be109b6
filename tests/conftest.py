"""
Pytest configuration file.

Sets up the Python path so test files can import from the python/ directory,
and provides a helper for writing configuration files.
"""
import sys
from pathlib import Path

import pytest
import yaml

# Add python directory to path for all tests
_python_dir = Path(__file__).parent.parent / 'python'
_python_dir_abs = str(_python_dir.absolute())
if _python_dir_abs not in sys.path:
    sys.path.insert(0, _python_dir_abs)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep overrides from the calling shell out of the tests"""
    for name in ("CONFIG_FILE", "ENGINE_EXECUTABLE", "SOURCE_PASSWORD", "DESTINATION_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_config(tmp_path):
    """Return a function writing {"app": settings} to a YAML file and returning its path"""

    def _write(settings, name="application.yaml"):
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.dump({"app": settings}, f)
        return str(path)

    return _write


@pytest.fixture
def base_settings():
    return {
        "sourceUrl": "source.example.com:5000",
        "sourceLogin": "reader",
        "sourcePassword": "readpass",
        "destinationUrl": "dest.example.com",
        "destinationLogin": "writer",
        "destinationPassword": "writepass",
    }
