"""Article-keyed line indices for orders and deliveries.

Each side of a reconciliation is reduced to a mapping from article id to
the single line for that article, so the detector can compare the two
sides with dictionary lookups.
"""

from __future__ import annotations

import uuid
from typing import Iterable

from app.core.exceptions import DuplicateArticleLineError
from app.core.logging import get_logger
from app.services.reconciliation.snapshots import LineSnapshot

logger = get_logger(__name__)

LineIndex = dict[uuid.UUID, LineSnapshot]

DUPLICATE_POLICIES = ("last_wins", "reject")


def build_line_index(
    lines: Iterable[LineSnapshot],
    duplicate_policy: str = "last_wins",
    source: str = "order",
) -> LineIndex:
    """Index lines by article id.

    The algorithm:
    1. Skip lines without an article id (free-text delivery lines). They
       are never compared against the other side.
    2. Store each remaining line under its article id.
    3. When an article id repeats:
       - ``last_wins``: the later line replaces the earlier one. The dict
         keeps the first occurrence's position, the values are the last.
       - ``reject``: raise ``DuplicateArticleLineError``.

    Args:
        lines: Line snapshots in their original sequence.
        duplicate_policy: ``last_wins`` or ``reject``.
        source: ``order`` or ``delivery``; used in log and error messages.

    Returns:
        An insertion-ordered mapping of article id to line.
    """
    if duplicate_policy not in DUPLICATE_POLICIES:
        raise ValueError(f"Unknown duplicate policy: {duplicate_policy!r}")

    index: LineIndex = {}
    skipped = 0

    for line in lines:
        if line.article_id is None:
            skipped += 1
            continue

        if line.article_id in index:
            if duplicate_policy == "reject":
                raise DuplicateArticleLineError(line.article_id, source)
            logger.warning(
                "Duplicate %s line for article %s: later line overwrites earlier "
                "(quantity %d -> %d)",
                source,
                line.article_id,
                index[line.article_id].quantity,
                line.quantity,
            )

        index[line.article_id] = line

    logger.debug(
        "Built %s line index: articles=%d skipped_text_only=%d",
        source,
        len(index),
        skipped,
    )
    return index
