import pytest
import sys
import os
import logging

# Ensure the project root is in the Python path for imports in tests
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import config_loader


@pytest.fixture(autouse=True)
def configure_logging(caplog):
    """Ensure logging is configured to capture DEBUG level messages for all tests."""
    caplog.set_level(logging.DEBUG, logger="root")


@pytest.fixture
def test_config(tmp_path):
    """Default configuration writing into a temporary output root."""
    config = config_loader.load_config()
    config['output_dir'] = str(tmp_path / "public")
    config['log_file'] = None
    config['retry_delay_seconds'] = 0
    return config
