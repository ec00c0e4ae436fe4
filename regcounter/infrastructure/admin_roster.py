"""Admin Roster — resolves the configured administrator groups to client ids.

Invariants:
    - list_administrators() returns the sorted union of members of every configured
      admin group that has a membership entry
    - No admin group configured, or none of them known → RosterUnavailableError
      (the engine then keeps counts unfiltered instead of dropping everyone)

Design Decisions:
    - Membership comes from settings (ADMIN_GROUP_MEMBERS) rather than a live server
      query: the query client is a separate collaborator, and any object with
      list_administrators() can replace this adapter
"""

import logging
from collections.abc import Collection, Mapping, Sequence

from regcounter.core.errors import RosterUnavailableError

logger = logging.getLogger(__name__)


class ConfiguredAdminRoster:
    """AdminRoster backed by a static group → members mapping."""

    def __init__(
        self,
        admin_group_ids: Collection[int],
        group_members: Mapping[int, Sequence[int]],
    ):
        self.admin_group_ids = frozenset(admin_group_ids)
        self.group_members = {g: tuple(m) for g, m in group_members.items()}

    def list_administrators(self) -> Sequence[int]:
        if not self.admin_group_ids:
            raise RosterUnavailableError("no admin group ids configured")
        known = [g for g in sorted(self.admin_group_ids) if g in self.group_members]
        if not known:
            raise RosterUnavailableError(
                f"no membership configured for admin groups {sorted(self.admin_group_ids)}",
            )
        missing = self.admin_group_ids.difference(known)
        if missing:
            logger.warning(f"Admin groups without membership: {sorted(missing)}")
        admins: set[int] = set()
        for group_id in known:
            admins.update(self.group_members[group_id])
        return sorted(admins)
