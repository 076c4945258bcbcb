import logging
from pathlib import Path

import pytest

from security_scanner.log import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_tree(tmp_path):
    """Write ``{relative_path: text}`` under ``tmp_path`` and return the root."""

    def _make(files):
        for relative, text in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(text, bytes):
                path.write_bytes(text)
            else:
                path.write_text(text, encoding="utf-8")
        return Path(tmp_path)

    return _make
