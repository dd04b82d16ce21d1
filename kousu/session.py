"""
Session cookie store.

Cookies are saved as the JSON list returned by Playwright's
``BrowserContext.cookies()`` and restored with ``add_cookies()``.
"""

import json
from pathlib import Path
from typing import List

from .errors import KousuError
from .logging_utils import get_logger

logger = get_logger()


def load_cookies(path: str) -> List[dict]:
    """
    Load cookies saved by ``save_cookies``.

    Raises:
        KousuError: If the file is missing or is not a JSON list
    """
    cookie_path = Path(path)
    if not cookie_path.exists():
        raise KousuError(f"Cookie file not found: {path}")

    try:
        cookies = json.loads(cookie_path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise KousuError(f"Cookie file is not valid JSON: {path}: {e}")

    if not isinstance(cookies, list):
        raise KousuError(f"Cookie file must contain a JSON array: {path}")

    logger.debug(f"Loaded {len(cookies)} cookie(s) from {path}")
    return cookies


def save_cookies(path: str, cookies: List[dict]):
    """Write cookies as pretty-printed JSON."""
    logger.info(f"Writing cookies to {path}")
    Path(path).write_text(json.dumps(cookies, indent=2) + "\n", encoding='utf-8')
