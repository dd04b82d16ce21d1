"""
Shared pytest fixtures.
"""

import logging

import pytest


@pytest.fixture
def caplog_kousu(caplog):
    """caplog that also sees the non-propagating kousu logger."""
    logger = logging.getLogger('kousu')
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger='kousu')
    yield caplog
    logger.removeHandler(caplog.handler)
