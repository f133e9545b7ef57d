"""
Behave environment configuration for DNS Updater scenarios.

Scenarios run offline against the mock provider and in-memory resolvers.
"""

import logging
import shutil
import tempfile
from pathlib import Path

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def before_all(context):
    """Set up test environment before all tests."""
    context.base_dir = Path(__file__).parent.parent
    logger.info("Test environment setup complete")


def before_scenario(context, scenario):
    """Set up each test scenario."""
    context.test_data_dir = Path(tempfile.mkdtemp(prefix="dns_updater_"))
    context.config_file = context.test_data_dir / "config.yaml"
    context.reports = []
    logger.info(f"Starting scenario: {scenario.name}")


def after_scenario(context, scenario):
    """Clean up after each test scenario."""
    orchestrator = getattr(context, "orchestrator", None)
    if orchestrator is not None:
        orchestrator.stop()

    shutil.rmtree(context.test_data_dir, ignore_errors=True)
    logger.info(f"Completed scenario: {scenario.name}")
