"""
Source acquisition and line normalisation.

Blank lines and lines whose first non-space characters are ``//`` are
dropped; every surviving line is trimmed and keeps its original 1-based
line number.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional, Union

from sjavac.config import VerifierConfig
from sjavac.errors import E, SourceError

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "//"


class SourceLine(NamedTuple):
    line_number: int
    text: str


def preprocess(source: Union[str, Iterable[str]]) -> List[SourceLine]:
    """Normalize *source* (a whole text or an iterable of raw lines)."""
    raw_lines = source.splitlines() if isinstance(source, str) else source
    result: List[SourceLine] = []
    for number, raw in enumerate(raw_lines, start=1):
        text = raw.strip()
        if not text or text.startswith(COMMENT_PREFIX):
            continue
        result.append(SourceLine(number, text))
    return result


def read_source(path: Union[str, Path], config: Optional[VerifierConfig] = None) -> str:
    """Read the source file at *path*, enforcing the configured suffix."""
    config = config or VerifierConfig()
    path = Path(path)
    name = str(path)

    if config.enforce_suffix and not name.endswith(config.source_suffix):
        raise SourceError(
            f"File must have {config.source_suffix} extension",
            code=E.BAD_SUFFIX,
            file=name,
        )
    if not path.is_file():
        raise SourceError(f"File not found: {name}", code=E.FILE_NOT_FOUND, file=name)

    try:
        text = path.read_text(encoding=config.encoding)
    except (OSError, UnicodeDecodeError, LookupError) as exc:
        raise SourceError(
            f"Failed to read file: {exc}",
            code=E.UNREADABLE_FILE,
            file=name,
        ) from exc

    logger.debug("read %s (%d bytes)", name, len(text))
    return text
