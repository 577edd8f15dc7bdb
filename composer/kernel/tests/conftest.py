"""
Composer kernel test configuration.

Kernel tests are pure: no server, no storage. The only shared state is the
process-wide element id counter, which tests never depend on.
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def _quiet_sandbox_console():
    """Keep author console output out of test reports unless a test asks for it."""
    logger = logging.getLogger("composer.sandbox.console")
    previous = logger.level
    logger.setLevel(logging.WARNING)
    yield
    logger.setLevel(previous)
