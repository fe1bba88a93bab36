"""
Tests for templates, push/retract/archive and completion detection
"""
import sqlite3

import pytest

from audition.core import lifecycle
from audition.core.submission import submit_scores
from audition.errors import ConflictError, NotFoundError, ValidationError
from audition.models import InstanceGroup, TemplateGroup
from audition.services import sessions as session_service

from helpers import full_scores, judge_identity


def submit_all(store, instance, judge):
    return submit_scores(
        store, judge_identity(judge), instance.id, judge.id,
        [full_scores(d) for d in instance.dancer_ids],
    )


# ==================== TEMPLATES ====================

def test_create_template(store, session, dancers):
    """Template keeps roster order and drops repeats"""
    ids = [dancers[1].id, dancers[0].id, dancers[1].id]
    template = lifecycle.create_template(store, session.id, 3, ids)
    assert isinstance(template, TemplateGroup)
    assert template.dancer_ids == [dancers[1].id, dancers[0].id]
    assert template.group_number == 3


def test_create_template_requires_dancers(store, session, dancers):
    with pytest.raises(ValidationError):
        lifecycle.create_template(store, session.id, 1, [])


def test_create_template_unknown_dancer(store, session, dancers):
    with pytest.raises(ValidationError):
        lifecycle.create_template(store, session.id, 1, [dancers[0].id, "nope"])


def test_duplicate_template_number(store, session, dancers, template):
    """Group numbers are unique among templates of a session"""
    with pytest.raises(ConflictError) as exc:
        lifecycle.create_template(store, session.id, template.group_number, [dancers[0].id])
    assert exc.value.error == "duplicate_group"


# ==================== PUSH ====================

def test_push_creates_active_instance(store, template, materials):
    instance = lifecycle.push_group(store, template.id, materials[0].id)
    assert isinstance(instance, InstanceGroup)
    assert instance.status == "active"
    assert instance.material_id == materials[0].id
    assert instance.dancer_ids == template.dancer_ids
    assert instance.pushed_at is not None


def test_push_same_template_twice_gives_independent_instances(store, template, materials):
    """One template, two materials: two instances with their own lifecycle"""
    ballet = lifecycle.push_group(store, template.id, materials[0].id)
    jazz = lifecycle.push_group(store, template.id, materials[1].id)
    assert ballet.id != jazz.id

    lifecycle.retract_group(store, ballet.id)
    assert store.get_group(jazz.id).status == "active"
    assert len(lifecycle.active_instances(store, template.session_id)) == 1


def test_push_requires_material(store, template):
    with pytest.raises(ValidationError):
        lifecycle.push_group(store, template.id, None)


def test_push_unknown_material(store, template):
    with pytest.raises(NotFoundError):
        lifecycle.push_group(store, template.id, "missing")


def test_push_instance_rejected(store, instance, materials):
    """Only templates can be pushed"""
    with pytest.raises(ValidationError):
        lifecycle.push_group(store, instance.id, materials[1].id)


def test_push_is_audited(store, session, instance):
    actions = store.list_admin_actions(session.id)
    assert [a.action_type for a in actions] == ["push_group"]
    assert actions[0].details["instance_id"] == instance.id


# ==================== RETRACT ====================

def test_retract_keeps_scores_by_default(store, instance, judges):
    submit_all(store, instance, judges[0])

    retracted = lifecycle.retract_group(store, instance.id)
    assert retracted.status == "retracted"
    assert len(store.list_scores(group_id=instance.id)) == 3
    assert len(store.list_submissions(group_id=instance.id)) == 1


def test_retract_delete_scores(store, instance, judges):
    submit_all(store, instance, judges[0])

    lifecycle.retract_group(store, instance.id, delete_scores=True)
    assert store.list_scores(group_id=instance.id) == []
    assert store.list_submissions(group_id=instance.id) == []


def test_retract_rolls_back_when_score_delete_fails(store, instance, judges):
    """Status change and score deletion commit together or not at all"""
    submit_all(store, instance, judges[0])
    with store.connect() as conn:
        conn.execute(
            "CREATE TRIGGER block_submission_delete BEFORE DELETE ON score_submissions "
            "BEGIN SELECT RAISE(ABORT, 'blocked'); END"
        )

    with pytest.raises(sqlite3.DatabaseError):
        lifecycle.retract_group(store, instance.id, delete_scores=True)
    assert store.get_group(instance.id).status == "active"
    assert len(store.list_scores(group_id=instance.id)) == 3


def test_retract_completed_instance(store, instance, judges):
    """Completed instances can still be retracted; their scores stay unless deleted"""
    for judge in judges:
        submit_all(store, instance, judge)
    assert store.get_group(instance.id).status == "completed"

    retracted = lifecycle.retract_group(store, instance.id)
    assert retracted.status == "retracted"
    assert len(store.list_submissions(group_id=instance.id)) == 3


def test_retract_twice(store, instance):
    lifecycle.retract_group(store, instance.id)
    with pytest.raises(ConflictError) as exc:
        lifecycle.retract_group(store, instance.id)
    assert exc.value.error == "already_retracted"


def test_retract_template_rejected(store, template):
    with pytest.raises(ValidationError):
        lifecycle.retract_group(store, template.id)


# ==================== ARCHIVE & LISTING ====================

def test_archive_hides_template_and_instances(store, session, template, materials):
    lifecycle.push_group(store, template.id, materials[0].id)
    lifecycle.push_group(store, template.id, materials[1].id)

    assert lifecycle.archive_group(store, template.id) == 3
    assert lifecycle.list_groups(store, session.id) == []
    assert len(lifecycle.list_groups(store, session.id, include_archived=True)) == 3
    assert lifecycle.active_instances(store, session.id) == []


def test_archive_instance_rejected(store, instance):
    with pytest.raises(ValidationError):
        lifecycle.archive_group(store, instance.id)


def test_list_groups_filters(store, session, template, materials):
    ballet = lifecycle.push_group(store, template.id, materials[0].id)
    lifecycle.push_group(store, template.id, materials[1].id)
    lifecycle.retract_group(store, ballet.id)

    by_material = lifecycle.list_groups(store, session.id, material_id=materials[0].id)
    assert [g.id for g in by_material] == [ballet.id]

    retracted = lifecycle.list_groups(store, session.id, status="retracted")
    assert [g.id for g in retracted] == [ballet.id]

    everything = lifecycle.list_groups(store, session.id)
    assert isinstance(everything[0], TemplateGroup)
    assert len(everything) == 3


# ==================== COMPLETION ====================

def test_group_completes_when_all_active_judges_submit(store, instance, judges):
    for judge in judges[:2]:
        result = submit_all(store, instance, judge)
        assert result["group_completed"] is False
    assert store.get_group(instance.id).status == "active"

    result = submit_all(store, instance, judges[2])
    assert result["group_completed"] is True

    group = store.get_group(instance.id)
    assert group.status == "completed"
    assert group.completed_at is not None


def test_deactivated_judge_lowers_the_bar(store, instance, judges):
    """With one judge deactivated, two submissions complete the group"""
    session_service.deactivate_judge(store, judges[2].id)
    submit_all(store, instance, judges[0])
    result = submit_all(store, instance, judges[1])
    assert result["group_completed"] is True


def test_deactivation_after_last_check_needs_recheck(store, instance, judges):
    """
    Deactivating the only missing judge does not complete the group by itself;
    the next completion check does.
    """
    submit_all(store, instance, judges[0])
    submit_all(store, instance, judges[1])
    session_service.deactivate_judge(store, judges[2].id)

    assert store.get_group(instance.id).status == "active"
    assert lifecycle.detect_completion(store, instance.id) is True
    assert store.get_group(instance.id).status == "completed"
    assert lifecycle.detect_completion(store, instance.id) is False


def test_deactivated_submitter_not_counted(store, instance, judges):
    """A submission from a judge deactivated later does not count toward completion"""
    submit_all(store, instance, judges[0])
    session_service.deactivate_judge(store, judges[0].id)

    progress = lifecycle.group_progress(store, instance.id)
    assert progress["submitted_judges"] == 0
    assert progress["active_judges"] == 2
    assert progress["is_complete"] is False


def test_retracted_group_never_completes(store, instance, judges):
    lifecycle.retract_group(store, instance.id)
    for judge in judges:
        store.record_submission(instance.id, judge.id, [])
    assert lifecycle.detect_completion(store, instance.id) is False
    assert store.get_group(instance.id).status == "retracted"


def test_no_active_judges_never_complete(store, instance, judges):
    for judge in judges:
        session_service.deactivate_judge(store, judge.id)
    assert lifecycle.group_progress(store, instance.id)["is_complete"] is False
    assert lifecycle.detect_completion(store, instance.id) is False
