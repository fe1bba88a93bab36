"""
Tests for the change feed and the events the store publishes
"""
import pytest

from audition.core import lifecycle
from audition.core.realtime import ChangeEvent, ChangeFeed
from audition.core.submission import submit_scores
from audition.services import sessions as session_service

from helpers import full_scores, judge_identity


def make_event(session_id="s1", table="dancer_groups"):
    return ChangeEvent(table=table, action="update", session_id=session_id, row_id="r1")


def test_subscribers_filtered_by_session():
    feed = ChangeFeed()
    seen = []
    feed.subscribe("s1", seen.append)

    assert feed.publish(make_event("s2")) == 0
    assert feed.publish(make_event("s1")) == 1
    assert [e.session_id for e in seen] == ["s1"]


def test_subscribers_filtered_by_table():
    feed = ChangeFeed()
    seen = []
    feed.subscribe("s1", seen.append, tables=["sessions"])

    feed.publish(make_event(table="dancer_groups"))
    feed.publish(make_event(table="sessions"))
    assert [e.table for e in seen] == ["sessions"]


def test_closed_subscription_receives_nothing():
    feed = ChangeFeed()
    seen = []
    sub = feed.subscribe("s1", seen.append)
    sub.close()
    sub.close()

    assert feed.publish(make_event()) == 0
    assert seen == []
    assert feed.subscriber_count() == 0


def test_failing_subscriber_does_not_block_others():
    feed = ChangeFeed()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    feed.subscribe("s1", broken)
    feed.subscribe("s1", seen.append)

    assert feed.publish(make_event()) == 1
    assert len(seen) == 1


def test_store_publishes_group_lifecycle(store, feed, session, template, materials):
    seen = []
    feed.subscribe(session.id, seen.append, tables=["dancer_groups"])

    instance = lifecycle.push_group(store, template.id, materials[0].id)
    lifecycle.retract_group(store, instance.id)

    assert [(e.action, e.row_id) for e in seen] == [("insert", instance.id), ("update", instance.id)]
    assert seen[-1].payload["status"] == "retracted"


def test_store_publishes_submissions(store, feed, session, instance, judges):
    seen = []
    feed.subscribe(session.id, seen.append, tables=["score_submissions"])

    judge = judges[0]
    submit_scores(store, judge_identity(judge), instance.id, judge.id,
                  [full_scores(d) for d in instance.dancer_ids])

    assert len(seen) == 1
    assert seen[0].payload["judge_id"] == judge.id


def test_session_events_hide_admin_pin(store, feed, session):
    seen = []
    feed.subscribe(session.id, seen.append)

    session_service.lock_session(store, session.id)
    assert seen[-1].table == "sessions"
    assert seen[-1].payload["is_locked"] is True
    assert "admin_pin" not in seen[-1].payload


def test_subscribe_unknown_table():
    with pytest.raises(ValueError):
        ChangeFeed().subscribe("s1", print, tables=["judges"])
