"""
Reading and writing tiktoken-format rank files.

Each non-blank line holds a base64-encoded byte sequence and its rank,
separated by a single space::

    IQ== 0
    Ig== 1
"""

import base64
import binascii
import logging
from collections.abc import Mapping
from pathlib import Path

from ._decorators import measure_time
from .errors import ModelLoadError
from .types import Ranks, Token, TokenBytes

RANKS_SUFFIX = ".tiktoken"

log = logging.getLogger(__name__)


@measure_time
def load_tiktoken_bpe(path: str | Path) -> Ranks:
    """
    Load a byte sequence -> rank table from a tiktoken rank file.

    Blank lines are skipped.

    :param path: Path to the rank file.
    :return: Mapping of byte sequences to ranks.
    :raises ModelLoadError: If the file is missing or a line is malformed.
    """
    path = Path(path)

    if not path.exists():
        raise ModelLoadError("rank filepath does not exist", model_path=str(path))

    log.info(f"loading ranks from {path}")

    ranks: Ranks = {}
    with path.open("r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue

            parts = line.split()
            if len(parts) != 2:
                raise ModelLoadError(
                    "rank line must hold a token and a rank",
                    model_path=str(path),
                    line_no=line_no,
                )
            try:
                seq = base64.b64decode(parts[0], validate=True)
            except binascii.Error as e:
                raise ModelLoadError(
                    "could not decode base64 token",
                    model_path=str(path),
                    line_no=line_no,
                ) from e
            try:
                ranks[seq] = int(parts[1])
            except ValueError as e:
                raise ModelLoadError(
                    f"rank is not a number: {parts[1]}",
                    model_path=str(path),
                    line_no=line_no,
                ) from e

    log.debug(f"loaded {len(ranks)} ranks")
    return ranks


def dump_tiktoken_bpe(ranks: Mapping[TokenBytes, Token], path: str | Path) -> None:
    """Write ``ranks`` to ``path`` in tiktoken format, ordered by rank."""
    path = Path(path)
    # create directory if does not exist
    path.parent.mkdir(parents=True, exist_ok=True)

    log.info(f"saving {len(ranks)} ranks to {path}")

    with path.open("w", encoding="utf-8", newline="\n") as f:
        for seq, rank in sorted(ranks.items(), key=lambda x: x[1]):
            f.write(f"{base64.b64encode(seq).decode('ascii')} {rank}\n")
