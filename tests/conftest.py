"""Test configuration for pytest."""

import logging
import os
import pytest


@pytest.fixture(autouse=True)
def configure_test_logging():
    """Configure logging for tests to be minimal."""
    os.environ['EIFFEL_INVARIANTS_LOG_LEVEL'] = 'WARNING'

    logging.getLogger().setLevel(logging.WARNING)

    # The rewriter logs every guarded method at INFO
    for logger_name in ['eiffel_invariants.rewrite', 'eiffel_invariants.manifest']:
        logging.getLogger(logger_name).setLevel(logging.ERROR)
