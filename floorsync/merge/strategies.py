"""
Resolution strategy for overlapping room changes.

Picks a deterministic winner among versions that changed the same room
property: editor priority first, then recency.
"""

import logging

from floorsync.merge.models import ResolutionOutcome, ResolutionReason, RoomChange

logger = logging.getLogger(__name__)


class PriorityTimestampStrategy:
    """
    Resolves overlapping changes by priority, then timestamp.

    Rules:
    - Lower priority number wins (1 is the highest authority)
    - On equal priority, the strictly later timestamp wins
    - Ties in both keep the first-seen contributor

    The result only depends on the priority/timestamp values, not on the
    order contributors are supplied in, unless both values tie.
    """

    def resolve(self, changes: list[RoomChange]) -> ResolutionOutcome:
        """
        Pick the winning change in a single pass.

        Args:
            changes: Contributing changes, in first-seen order

        Returns:
            ResolutionOutcome with winner, losers and reason
        """
        if not changes:
            raise ValueError("Cannot resolve an empty set of changes")

        winner = changes[0]
        reason = ResolutionReason.HIGHEST_PRIORITY
        detail = f"highest_priority ({winner.creator_priority})"

        for challenger in changes[1:]:
            if challenger.creator_priority < winner.creator_priority:
                reason = ResolutionReason.HIGHER_PRIORITY
                detail = (
                    f"higher_priority ({challenger.creator_priority} "
                    f"vs {winner.creator_priority})"
                )
                winner = challenger
            elif (
                challenger.creator_priority == winner.creator_priority
                and challenger.created_at_epoch > winner.created_at_epoch
            ):
                reason = ResolutionReason.LATEST_TIMESTAMP
                detail = f"latest_timestamp (same priority {challenger.creator_priority})"
                winner = challenger

        losers = tuple(change for change in changes if change is not winner)
        logger.debug(
            f"Room {winner.room.id}: version {winner.version_id} wins over "
            f"{len(losers)} other(s) by {detail}"
        )
        return ResolutionOutcome(winner=winner, losers=losers, reason=reason, detail=detail)
