"""
Pytest configuration and shared fixtures for usdtgen tests.

This module provides common test fixtures, configuration, and utilities
used across the test suite.
"""

import pytest
from pathlib import Path

from usdtgen.pipeline import compile_source
from usdtgen.utils.config import set_config


SAMPLE_SOURCE = """\
/* Sample provider used across the test suite. */
provider myapp {
    probe start();
    probe request(uint8_t, char *);
    probe done(int64_t, uint64_t, uintptr_t);
};

provider net {
    probe recv(uint32_t);
}
"""


# Test configuration
@pytest.fixture(autouse=True)
def clean_config(monkeypatch, tmp_path):
    """Run every test with default configuration and no usdtgen environment overrides."""
    for name in (
        "USDTGEN_CONFIG",
        "USDTGEN_MAX_PROBE_ARGUMENTS",
        "USDTGEN_LOG_LEVEL",
        "USDTGEN_LIBRARY_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    set_config(None)
    yield
    set_config(None)


# Source fixtures
@pytest.fixture
def sample_source():
    """Provider definition text with two providers and four probes."""
    return SAMPLE_SOURCE


@pytest.fixture
def sample_file(sample_source):
    """Annotated ProviderFile for the sample source."""
    return compile_source(sample_source, "probes.d")


@pytest.fixture
def sample_path(tmp_path, sample_source):
    """Sample source written to disk as probes.d."""
    path = Path(tmp_path) / "probes.d"
    path.write_text(sample_source, encoding="utf-8")
    return path


# Custom pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "filecheck: marks tests as FileCheck-style output tests")
