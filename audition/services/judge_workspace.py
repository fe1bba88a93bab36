"""
Judge workspace - one judge's client session

Holds the judge's drafts and follows the session through the change feed.
Events are only hints: every event triggers a re-fetch from the store, and
the workspace state is always derived from what the store says.
"""
import logging
from typing import Any, Dict, Optional

from audition.core.drafts import DraftKey, DraftStore, ScoreDraft
from audition.core.realtime import ChangeEvent, ChangeFeed
from audition.core.store import Store
from audition.core.submission import submit_scores
from audition.errors import ConflictError, ValidationError
from audition.models import Identity, InstanceGroup


logger = logging.getLogger(__name__)


class JudgeWorkspace:
    """Drafts + current group for one judge, reconciled against the store"""

    def __init__(self, store: Store, feed: ChangeFeed, identity: Identity,
                 drafts: Optional[DraftStore] = None):
        if not identity.judge_id:
            raise ValidationError("A judge workspace needs a judge identity")
        self.store = store
        self.identity = identity
        self.drafts = drafts if drafts is not None else DraftStore()
        self.current_group: Optional[InstanceGroup] = None
        self.is_locked = False
        self._subscription = feed.subscribe(
            identity.session_id, self._on_change, tables=["dancer_groups", "sessions"]
        )
        self.refresh()

    @property
    def judge_id(self) -> str:
        return self.identity.judge_id

    def _on_change(self, event: ChangeEvent) -> None:
        logger.debug(f"🔔 {event.table}/{event.action} {event.row_id} -> refreshing judge {self.judge_id}")
        self.refresh()

    def refresh(self) -> Optional[InstanceGroup]:
        """
        Re-derive the workspace from the store

        - drafts of groups that are no longer active are dropped
        - the newest active group this judge has not submitted becomes current,
          and gets a draft
        """
        session = self.store.get_session(self.identity.session_id)
        self.is_locked = bool(session and session.is_locked)

        instances = [
            g for g in self.store.list_groups(self.identity.session_id)
            if isinstance(g, InstanceGroup)
        ]
        statuses = {g.id: g.status for g in instances}
        for key in self.drafts.keys_for_judge(self.judge_id):
            if statuses.get(key.group_id) != "active":
                self.drafts.discard(key)
                logger.info(f"🧹 Dropped draft for group {key.group_id} ({statuses.get(key.group_id, 'gone')})")

        submitted = {s.group_id for s in self.store.list_submissions(judge_id=self.judge_id)}
        candidates = [
            g for g in instances
            if g.status == "active" and not g.is_archived and g.id not in submitted
        ]
        candidates.sort(key=lambda g: g.pushed_at or "")
        self.current_group = candidates[-1] if candidates else None

        if self.current_group is not None:
            self.drafts.open(self._key(self.current_group.id))
        return self.current_group

    def _key(self, group_id: str) -> DraftKey:
        return DraftKey(group_id=group_id, judge_id=self.judge_id)

    def draft(self) -> Optional[ScoreDraft]:
        """Draft of the current group, if any"""
        if self.current_group is None:
            return None
        return self.drafts.get(self._key(self.current_group.id))

    def set_score(self, dancer_id: str, category: str, value: float) -> None:
        draft = self.draft()
        if draft is None:
            raise ValidationError("No active group to score")
        if dancer_id not in self.current_group.dancer_ids:
            raise ValidationError(f"Dancer {dancer_id} is not part of this group")
        draft.set_score(dancer_id, category, value)

    def can_submit(self) -> bool:
        """Every dancer of the current group fully scored and the session unlocked"""
        draft = self.draft()
        return bool(draft and not self.is_locked and draft.is_complete_for(self.current_group.dancer_ids))

    def submit(self) -> Dict[str, Any]:
        """Submit the current draft; the draft is dropped once the server accepts it"""
        draft = self.draft()
        if draft is None:
            raise ValidationError("No active group to submit")

        group = self.current_group
        try:
            result = submit_scores(
                self.store, self.identity, group.id, self.judge_id,
                draft.to_submission(group.dancer_ids),
            )
        except ConflictError as e:
            if e.error == "already_submitted":
                self.drafts.discard(self._key(group.id))
                self.refresh()
            raise

        self.drafts.discard(self._key(group.id))
        self.refresh()
        return result

    def close(self) -> None:
        """End of the client session: stop listening and drop this judge's drafts"""
        self._subscription.close()
        self.drafts.discard_judge(self.judge_id)
        self.current_group = None
