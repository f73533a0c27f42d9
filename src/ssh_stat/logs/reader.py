"""Input readers for auth log files.

Two access patterns are offered: a full read that returns every line up
front, and a lazy line-by-line scan. Both yield the same lines, so the
aggregation result does not depend on which one feeds the Dispatcher.
"""

from pathlib import Path
from typing import Iterator, List, Union

import structlog

from ssh_stat.exceptions import InputReadError

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def read_lines(path: PathLike) -> List[str]:
    """Read a whole log file and return its lines without line endings.

    Raises:
        InputReadError: If the file cannot be opened or read
    """
    try:
        content = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise InputReadError(str(path), e.strerror or str(e))

    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    logger.debug("input_read", path=str(path), lines=len(lines))
    return lines


def iter_lines(path: PathLike) -> Iterator[str]:
    """Scan a log file line by line.

    The file is opened when iteration starts and closed when it ends.

    Raises:
        InputReadError: If the file cannot be opened or read
    """
    count = 0
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in f:
                count += 1
                yield line.rstrip("\r\n")
    except OSError as e:
        raise InputReadError(str(path), e.strerror or str(e))
    logger.debug("input_scanned", path=str(path), lines=count)
