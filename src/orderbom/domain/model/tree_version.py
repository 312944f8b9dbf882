"""Tree versions and the draft guard.

A tree version is a versioned pricing/option definition owned by another
service; the engine only sees its lifecycle status.  Orders must never be
built against a DRAFT version, which may still change before publish.
"""

from __future__ import annotations

from enum import Enum

from orderbom.domain.exceptions import ConflictError

TREE_VERSION_DRAFT_CODE = "PBV2_TREE_VERSION_DRAFT"


class TreeVersionStatus(Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class GuardContext(Enum):
    PERSIST = "persist"
    ACCEPT = "accept"
    RECOMPUTE = "recompute"


_VERBS = {
    GuardContext.PERSIST: "persisted",
    GuardContext.ACCEPT: "accepted",
    GuardContext.RECOMPUTE: "recomputed",
}


def assert_not_draft(
    status: TreeVersionStatus | str | None,
    context: GuardContext | str,
) -> None:
    """Raise ConflictError if *status* is DRAFT.

    Any other status, including None or an unrecognised string, passes.
    """
    ctx = GuardContext(context)
    value = status.value if isinstance(status, TreeVersionStatus) else status
    if value is None or str(value).upper() != TreeVersionStatus.DRAFT.value:
        return
    raise ConflictError(
        f"PBV2 DRAFT tree versions cannot be {_VERBS[ctx]} on orders",
        code=TREE_VERSION_DRAFT_CODE,
        context=ctx.value,
    )
