"""
Group Lifecycle Manager

Templates are reusable rosters with no state of their own. Each push of a
template creates an independent instance:

    queued -> active -> completed
    queued | active | completed -> retracted   (terminal)

Every decision reads the store fresh; nothing is cached between calls.
Callers are responsible for the admin-role check.
"""
import logging
from typing import List, Optional

from audition.core.store import Store
from audition.errors import ConflictError, NotFoundError, ValidationError, session_locked
from audition.models import GROUP_STATUSES, DancerGroup, InstanceGroup, Session, TemplateGroup


logger = logging.getLogger(__name__)


def _require_unlocked_session(store: Store, session_id: str) -> Session:
    session = store.get_session(session_id)
    if session is None:
        raise NotFoundError("Session not found")
    if session.is_locked:
        raise session_locked()
    return session


def get_group(store: Store, group_id: str) -> DancerGroup:
    group = store.get_group(group_id)
    if group is None:
        raise NotFoundError("Group not found")
    return group


def get_instance(store: Store, group_id: str) -> InstanceGroup:
    """Load a group that must be a pushed instance"""
    group = get_group(store, group_id)
    if not isinstance(group, InstanceGroup):
        raise ValidationError("Group is a template, not a pushed instance")
    return group


def create_template(store: Store, session_id: str, group_number: int,
                    dancer_ids: List[str]) -> TemplateGroup:
    """
    Create a reusable dancer roster

    Args:
        session_id: Owning session
        group_number: Number unique among the session's templates
        dancer_ids: Roster (must be dancers of this session)

    Returns:
        New TemplateGroup
    """
    _require_unlocked_session(store, session_id)
    if not dancer_ids:
        raise ValidationError("A group needs at least one dancer")
    if group_number is None or group_number < 1:
        raise ValidationError("group_number must be a positive integer")

    known = {d.id for d in store.list_dancers(session_id)}
    unknown = [d for d in dancer_ids if d not in known]
    if unknown:
        raise ValidationError(f"Unknown dancer ids for this session: {', '.join(unknown)}")

    # Keep roster order, drop repeats
    roster = list(dict.fromkeys(dancer_ids))
    template = store.insert_template(session_id, group_number, roster)
    logger.info(f"📋 Template group {group_number} created with {len(roster)} dancers")
    return template


def push_group(store: Store, template_id: str, material_id: Optional[str]) -> InstanceGroup:
    """
    Push a template against a material, creating an active instance

    Other active instances are left alone: running one group at a time is
    the admin's call, not an enforced rule. A warning is logged instead.
    """
    if not material_id:
        raise ValidationError("materialId is required")

    template = get_group(store, template_id)
    if not isinstance(template, TemplateGroup):
        raise ValidationError("Only template groups can be pushed")

    _require_unlocked_session(store, template.session_id)

    material = store.get_material(material_id)
    if material is None or material.session_id != template.session_id:
        raise NotFoundError("Material not found")

    already_active = active_instances(store, template.session_id)
    if already_active:
        logger.warning(
            f"⚠️ Pushing group {template.group_number} while "
            f"{len(already_active)} other instance(s) are still active"
        )

    instance = store.insert_instance(template, material_id, status="active")
    store.log_admin_action(template.session_id, "push_group", {
        "template_id": template.id,
        "instance_id": instance.id,
        "group_number": template.group_number,
        "material_id": material_id,
    })
    logger.info(f"🚀 Group {template.group_number} pushed for material '{material.name}' ({instance.id})")
    return instance


def retract_group(store: Store, instance_id: str, delete_scores: bool = False) -> InstanceGroup:
    """
    Retract a pushed instance

    Args:
        instance_id: Instance to retract
        delete_scores: Also delete the instance's scores and submission markers;
            otherwise they are kept and still count in results

    Returns:
        Updated instance (status=retracted)
    """
    instance = get_instance(store, instance_id)
    _require_unlocked_session(store, instance.session_id)

    if instance.status == "retracted":
        raise ConflictError("already_retracted", "Group is already retracted")

    updated, removed = store.retract_instance(instance.id, delete_scores=delete_scores)
    if delete_scores:
        logger.info(f"🗑️ Deleted {removed} score rows of retracted group {instance.id}")

    store.log_admin_action(instance.session_id, "retract_group", {
        "group_id": instance.id,
        "group_number": instance.group_number,
        "material_id": instance.material_id,
        "scores_deleted": delete_scores,
    })
    logger.info(f"↩️ Group {instance.group_number} ({instance.id}) retracted")
    return updated


def archive_group(store: Store, template_id: str) -> int:
    """
    Archive a template together with every instance pushed from it

    Rows are kept: archived instances still feed the results.

    Returns:
        Number of rows archived
    """
    template = get_group(store, template_id)
    if not isinstance(template, TemplateGroup):
        raise ValidationError("Cannot archive an instance, archive the template instead")
    _require_unlocked_session(store, template.session_id)

    count = store.archive_group_family(template.session_id, template.group_number)
    store.log_admin_action(template.session_id, "archive_group", {
        "template_id": template.id,
        "group_number": template.group_number,
        "archived_rows": count,
    })
    logger.info(f"📦 Archived group {template.group_number} ({count} rows)")
    return count


def list_groups(store: Store, session_id: str, material_id: Optional[str] = None,
                status: Optional[str] = None, include_archived: bool = False) -> List[DancerGroup]:
    """
    List a session's groups, templates first within each group number

    Filtering by material or status only ever returns instances.
    """
    if status and status not in GROUP_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(GROUP_STATUSES)}")
    groups = store.list_groups(session_id)
    if not include_archived:
        groups = [g for g in groups if not g.is_archived]
    if material_id:
        groups = [g for g in groups if isinstance(g, InstanceGroup) and g.material_id == material_id]
    if status:
        groups = [g for g in groups if isinstance(g, InstanceGroup) and g.status == status]
    return groups


def active_instances(store: Store, session_id: str) -> List[InstanceGroup]:
    """Non-archived instances currently open for scoring"""
    return [
        g for g in store.list_groups(session_id)
        if isinstance(g, InstanceGroup) and g.status == "active" and not g.is_archived
    ]


def group_progress(store: Store, instance_id: str) -> dict:
    """Submission progress for an instance (two independent reads)"""
    instance = get_instance(store, instance_id)
    submitted = store.count_submitted_judges(instance.id)
    active = store.count_active_judges(instance.session_id)
    return {
        "group_id": instance.id,
        "status": instance.status,
        "submitted_judges": submitted,
        "active_judges": active,
        "is_complete": active > 0 and submitted == active,
    }


def detect_completion(store: Store, instance_id: str) -> bool:
    """
    Mark an instance completed once every active judge has submitted

    The judge-activation count is read live each time, so deactivating a
    judge lowers the bar. Submission count and judge count are separate
    point-in-time reads (best-effort, not transactional): a judge
    deactivated after the last check leaves the group active until the
    next check runs.

    Nothing changes while the session is locked; the next check after
    unlocking settles the group.

    Returns:
        True if this call moved the instance to completed
    """
    progress = group_progress(store, instance_id)
    if progress["status"] != "active" or not progress["is_complete"]:
        return False

    session = store.get_session(store.get_group(instance_id).session_id)
    if session is None or session.is_locked:
        logger.info(f"🔒 Group {instance_id} is complete but its session is locked, leaving it active")
        return False

    if store.complete_group_if_active(instance_id):
        logger.info(
            f"🏁 Group {instance_id} completed "
            f"({progress['submitted_judges']}/{progress['active_judges']} judges)"
        )
        return True
    return False
