"""Abstract lookup of tree version lifecycle status."""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderbom.domain.model.tree_version import TreeVersionStatus


class TreeVersionRepository(ABC):

    @abstractmethod
    def get_status(self, tree_version_id: str) -> TreeVersionStatus | None:
        """Return the status of a tree version, or None if unknown."""
