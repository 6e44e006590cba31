"""Test package for linetap unit and integration tests."""

import logging

logging.getLogger("linetap").setLevel(logging.WARNING)
