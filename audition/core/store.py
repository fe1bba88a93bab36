"""
Relational store (SQLite)

Every operation opens its own connection, so no coordination state (lock
flag, judge activation, submission existence) is ever cached in-process.
The store itself enforces the one-submission-per-(group, judge) rule through
a UNIQUE constraint; that is what closes the concurrent-submit race.

Row changes on sessions, dancer_groups and score_submissions are published
to the change feed after commit.
"""
import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from audition.core.realtime import ChangeEvent, ChangeFeed
from audition.errors import ConflictError, NotFoundError
from audition.models import (
    SCORE_CATEGORIES,
    AdminAction,
    Dancer,
    DancerGroup,
    InstanceGroup,
    Judge,
    Material,
    Score,
    ScoreEntry,
    ScoreSubmission,
    Session,
    TemplateGroup,
)
from audition.utils import new_id, utc_now


logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    session_code TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    date TEXT NOT NULL,
    admin_pin TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'setup',
    is_locked INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS dancers (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    dancer_number INTEGER NOT NULL,
    name TEXT NOT NULL,
    grade INTEGER,
    created_at TEXT NOT NULL,
    UNIQUE(session_id, dancer_number)
);

CREATE TABLE IF NOT EXISTS materials (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS judges (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    judge_pin TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    is_admin_judge INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    UNIQUE(session_id, judge_pin)
);

-- material_id NULL = template, NOT NULL = pushed instance
CREATE TABLE IF NOT EXISTS dancer_groups (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    material_id TEXT REFERENCES materials(id) ON DELETE CASCADE,
    group_number INTEGER NOT NULL,
    status TEXT,
    dancer_ids TEXT NOT NULL DEFAULT '[]',
    is_archived INTEGER NOT NULL DEFAULT 0,
    pushed_at TEXT,
    completed_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_template_group_number
    ON dancer_groups(session_id, group_number) WHERE material_id IS NULL;

CREATE TABLE IF NOT EXISTS scores (
    id TEXT PRIMARY KEY,
    group_id TEXT NOT NULL REFERENCES dancer_groups(id) ON DELETE CASCADE,
    judge_id TEXT NOT NULL REFERENCES judges(id) ON DELETE CASCADE,
    dancer_id TEXT NOT NULL REFERENCES dancers(id),
    technique REAL,
    musicality REAL,
    expression REAL,
    timing REAL,
    presentation REAL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS score_submissions (
    id TEXT PRIMARY KEY,
    group_id TEXT NOT NULL REFERENCES dancer_groups(id) ON DELETE CASCADE,
    judge_id TEXT NOT NULL REFERENCES judges(id) ON DELETE CASCADE,
    score_count INTEGER NOT NULL,
    submitted_at TEXT NOT NULL,
    UNIQUE(group_id, judge_id)
);

CREATE TABLE IF NOT EXISTS admin_actions (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    action_type TEXT NOT NULL,
    details TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL
);
"""


def _group_from_row(row: sqlite3.Row) -> DancerGroup:
    """Map the nullable-discriminant row onto the tagged variant"""
    data = dict(row)
    data["dancer_ids"] = json.loads(data["dancer_ids"])
    data["is_archived"] = bool(data["is_archived"])
    if data["material_id"] is None:
        for key in ("material_id", "status", "pushed_at", "completed_at"):
            data.pop(key)
        return TemplateGroup(**data)
    return InstanceGroup(**data)


def _session_from_row(row: sqlite3.Row) -> Session:
    data = dict(row)
    data["is_locked"] = bool(data["is_locked"])
    return Session(**data)


def _judge_from_row(row: sqlite3.Row) -> Judge:
    data = dict(row)
    data["is_active"] = bool(data["is_active"])
    data["is_admin_judge"] = bool(data["is_admin_judge"])
    return Judge(**data)


class Store:
    """CRUD access to the audition database"""

    def __init__(self, db_path: str, feed: Optional[ChangeFeed] = None):
        """
        Args:
            db_path: SQLite file path (must be a file: each call opens a new connection)
            feed: Change feed to publish row changes to
        """
        self.db_path = db_path
        self.feed = feed
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        with self.connect() as conn:
            conn.executescript(SCHEMA)
        logger.info(f"🗄️ Store ready at {db_path}")

    # ==================== CONNECTION HELPERS ====================

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Autocommit connection, closed on exit"""
        conn = sqlite3.connect(self.db_path, timeout=30, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Write transaction taking the database write lock up front"""
        with self.connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise

    def _fetch_one(self, query: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self.connect() as conn:
            return conn.execute(query, params).fetchone()

    def _fetch_all(self, query: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self.connect() as conn:
            return conn.execute(query, params).fetchall()

    def _execute(self, query: str, params: Sequence[Any] = ()) -> int:
        with self.connect() as conn:
            return conn.execute(query, params).rowcount

    def _publish(self, table: str, action: str, session_id: str, row_id: str,
                 payload: Optional[Dict[str, Any]] = None) -> None:
        if self.feed is None:
            return
        self.feed.publish(ChangeEvent(
            table=table, action=action, session_id=session_id,
            row_id=row_id, payload=payload or {}
        ))

    # ==================== SESSIONS ====================

    def insert_session(self, session_code: str, name: str, date: str, admin_pin: str) -> Session:
        now = utc_now()
        session_id = new_id()
        try:
            self._execute(
                "INSERT INTO sessions(id, session_code, name, date, admin_pin, status, is_locked, "
                "created_at, updated_at) VALUES(?,?,?,?,?,'setup',0,?,?)",
                (session_id, session_code, name, date, admin_pin, now, now),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError("duplicate_code", "Session code already in use") from e
        session = self.get_session(session_id)
        self._publish("sessions", "insert", session.id, session.id, session.model_dump(exclude={"admin_pin"}))
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        row = self._fetch_one("SELECT * FROM sessions WHERE id=?", (session_id,))
        return _session_from_row(row) if row else None

    def get_session_by_code(self, session_code: str) -> Optional[Session]:
        row = self._fetch_one("SELECT * FROM sessions WHERE session_code=?", (session_code.upper(),))
        return _session_from_row(row) if row else None

    def list_sessions(self) -> List[Session]:
        rows = self._fetch_all("SELECT * FROM sessions ORDER BY created_at DESC")
        return [_session_from_row(r) for r in rows]

    def update_session(self, session_id: str, **fields: Any) -> Session:
        if "is_locked" in fields:
            fields["is_locked"] = int(fields["is_locked"])
        fields["updated_at"] = utc_now()
        assignments = ", ".join(f"{k}=?" for k in fields)
        if not self._execute(f"UPDATE sessions SET {assignments} WHERE id=?", (*fields.values(), session_id)):
            raise NotFoundError("Session not found")
        session = self.get_session(session_id)
        self._publish("sessions", "update", session.id, session.id, session.model_dump(exclude={"admin_pin"}))
        return session

    def delete_session(self, session_id: str) -> bool:
        deleted = self._execute("DELETE FROM sessions WHERE id=?", (session_id,)) > 0
        if deleted:
            self._publish("sessions", "delete", session_id, session_id)
        return deleted

    # ==================== DANCERS ====================

    def insert_dancer(self, session_id: str, dancer_number: int, name: str,
                      grade: Optional[int] = None) -> Dancer:
        dancer = Dancer(
            id=new_id(), session_id=session_id, dancer_number=dancer_number,
            name=name, grade=grade, created_at=utc_now()
        )
        try:
            self._execute(
                "INSERT INTO dancers(id, session_id, dancer_number, name, grade, created_at) "
                "VALUES(?,?,?,?,?,?)",
                (dancer.id, session_id, dancer_number, name, grade, dancer.created_at),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError(
                "duplicate_dancer", f"Dancer #{dancer_number} already exists in this session",
                dancer_number=dancer_number
            ) from e
        return dancer

    def get_dancer(self, dancer_id: str) -> Optional[Dancer]:
        row = self._fetch_one("SELECT * FROM dancers WHERE id=?", (dancer_id,))
        return Dancer(**dict(row)) if row else None

    def list_dancers(self, session_id: str, dancer_ids: Optional[Sequence[str]] = None) -> List[Dancer]:
        rows = self._fetch_all(
            "SELECT * FROM dancers WHERE session_id=? ORDER BY dancer_number", (session_id,)
        )
        dancers = [Dancer(**dict(r)) for r in rows]
        if dancer_ids is not None:
            wanted = set(dancer_ids)
            dancers = [d for d in dancers if d.id in wanted]
        return dancers

    def dancer_has_scores(self, dancer_id: str) -> bool:
        return self._fetch_one("SELECT 1 FROM scores WHERE dancer_id=? LIMIT 1", (dancer_id,)) is not None

    def delete_dancer(self, dancer_id: str) -> None:
        """Delete a dancer, its scores, and prune it from every group roster"""
        with self.transaction() as conn:
            conn.execute("DELETE FROM scores WHERE dancer_id=?", (dancer_id,))
            rows = conn.execute(
                "SELECT g.id, g.dancer_ids FROM dancer_groups g "
                "JOIN dancers d ON d.session_id = g.session_id WHERE d.id=?",
                (dancer_id,),
            ).fetchall()
            now = utc_now()
            for row in rows:
                ids = json.loads(row["dancer_ids"])
                if dancer_id in ids:
                    ids = [i for i in ids if i != dancer_id]
                    conn.execute(
                        "UPDATE dancer_groups SET dancer_ids=?, updated_at=? WHERE id=?",
                        (json.dumps(ids), now, row["id"]),
                    )
            conn.execute("DELETE FROM dancers WHERE id=?", (dancer_id,))

    # ==================== MATERIALS ====================

    def insert_material(self, session_id: str, name: str) -> Material:
        material = Material(id=new_id(), session_id=session_id, name=name, created_at=utc_now())
        self._execute(
            "INSERT INTO materials(id, session_id, name, created_at) VALUES(?,?,?,?)",
            (material.id, session_id, name, material.created_at),
        )
        return material

    def get_material(self, material_id: str) -> Optional[Material]:
        row = self._fetch_one("SELECT * FROM materials WHERE id=?", (material_id,))
        return Material(**dict(row)) if row else None

    def list_materials(self, session_id: str) -> List[Material]:
        rows = self._fetch_all(
            "SELECT * FROM materials WHERE session_id=? ORDER BY created_at", (session_id,)
        )
        return [Material(**dict(r)) for r in rows]

    # ==================== JUDGES ====================

    def insert_judge(self, session_id: str, name: str, judge_pin: str,
                     is_admin_judge: bool = False) -> Judge:
        judge = Judge(
            id=new_id(), session_id=session_id, name=name, judge_pin=judge_pin,
            is_active=True, is_admin_judge=is_admin_judge, created_at=utc_now()
        )
        try:
            self._execute(
                "INSERT INTO judges(id, session_id, name, judge_pin, is_active, is_admin_judge, created_at) "
                "VALUES(?,?,?,?,1,?,?)",
                (judge.id, session_id, name, judge_pin, int(is_admin_judge), judge.created_at),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError("duplicate_pin", "Judge PIN already in use in this session") from e
        return judge

    def get_judge(self, judge_id: str) -> Optional[Judge]:
        row = self._fetch_one("SELECT * FROM judges WHERE id=?", (judge_id,))
        return _judge_from_row(row) if row else None

    def list_judges(self, session_id: str) -> List[Judge]:
        rows = self._fetch_all(
            "SELECT * FROM judges WHERE session_id=? ORDER BY created_at", (session_id,)
        )
        return [_judge_from_row(r) for r in rows]

    def find_judge_by_pin(self, session_id: str, judge_pin: str) -> Optional[Judge]:
        row = self._fetch_one(
            "SELECT * FROM judges WHERE session_id=? AND judge_pin=? AND is_active=1",
            (session_id, judge_pin),
        )
        return _judge_from_row(row) if row else None

    def find_admin_judge(self, session_id: str) -> Optional[Judge]:
        row = self._fetch_one(
            "SELECT * FROM judges WHERE session_id=? AND is_admin_judge=1 AND is_active=1",
            (session_id,),
        )
        return _judge_from_row(row) if row else None

    def pin_in_use(self, session_id: str, judge_pin: str) -> bool:
        row = self._fetch_one(
            "SELECT 1 FROM judges WHERE session_id=? AND judge_pin=?", (session_id, judge_pin)
        )
        return row is not None

    def set_judge_active(self, judge_id: str, is_active: bool) -> bool:
        return self._execute(
            "UPDATE judges SET is_active=? WHERE id=?", (int(is_active), judge_id)
        ) > 0

    def count_active_judges(self, session_id: str) -> int:
        row = self._fetch_one(
            "SELECT COUNT(*) AS n FROM judges WHERE session_id=? AND is_active=1", (session_id,)
        )
        return row["n"]

    # ==================== DANCER GROUPS ====================

    def insert_template(self, session_id: str, group_number: int, dancer_ids: List[str]) -> TemplateGroup:
        now = utc_now()
        group_id = new_id()
        try:
            self._execute(
                "INSERT INTO dancer_groups(id, session_id, material_id, group_number, status, dancer_ids, "
                "is_archived, created_at, updated_at) VALUES(?,?,NULL,?,NULL,?,0,?,?)",
                (group_id, session_id, group_number, json.dumps(dancer_ids), now, now),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError(
                "duplicate_group", f"Group {group_number} already exists in this session",
                group_number=group_number
            ) from e
        group = self.get_group(group_id)
        self._publish("dancer_groups", "insert", session_id, group_id, group.model_dump())
        return group

    def insert_instance(self, template: TemplateGroup, material_id: str, status: str = "active") -> InstanceGroup:
        now = utc_now()
        group_id = new_id()
        self._execute(
            "INSERT INTO dancer_groups(id, session_id, material_id, group_number, status, dancer_ids, "
            "is_archived, pushed_at, created_at, updated_at) VALUES(?,?,?,?,?,?,0,?,?,?)",
            (group_id, template.session_id, material_id, template.group_number, status,
             json.dumps(list(template.dancer_ids)), now, now, now),
        )
        group = self.get_group(group_id)
        self._publish("dancer_groups", "insert", group.session_id, group_id, group.model_dump())
        return group

    def get_group(self, group_id: str) -> Optional[DancerGroup]:
        row = self._fetch_one("SELECT * FROM dancer_groups WHERE id=?", (group_id,))
        return _group_from_row(row) if row else None

    def list_groups(self, session_id: str) -> List[DancerGroup]:
        rows = self._fetch_all(
            "SELECT * FROM dancer_groups WHERE session_id=? ORDER BY group_number, pushed_at",
            (session_id,),
        )
        return [_group_from_row(r) for r in rows]

    def update_group(self, group_id: str, **fields: Any) -> DancerGroup:
        fields["updated_at"] = utc_now()
        assignments = ", ".join(f"{k}=?" for k in fields)
        if not self._execute(
            f"UPDATE dancer_groups SET {assignments} WHERE id=?", (*fields.values(), group_id)
        ):
            raise NotFoundError("Group not found")
        group = self.get_group(group_id)
        self._publish("dancer_groups", "update", group.session_id, group_id, group.model_dump())
        return group

    def complete_group_if_active(self, group_id: str) -> bool:
        """Conditional active -> completed; False if no longer active or the session is locked"""
        now = utc_now()
        changed = self._execute(
            "UPDATE dancer_groups SET status='completed', completed_at=?, updated_at=? "
            "WHERE id=? AND status='active' AND NOT EXISTS("
            "SELECT 1 FROM sessions s WHERE s.id = dancer_groups.session_id AND s.is_locked = 1)",
            (now, now, group_id),
        ) > 0
        if changed:
            group = self.get_group(group_id)
            self._publish("dancer_groups", "update", group.session_id, group_id, group.model_dump())
        return changed

    def archive_group_family(self, session_id: str, group_number: int) -> int:
        """Archive a template and every instance pushed from it"""
        now = utc_now()
        with self.connect() as conn:
            ids = [r["id"] for r in conn.execute(
                "SELECT id FROM dancer_groups WHERE session_id=? AND group_number=?",
                (session_id, group_number),
            ).fetchall()]
            conn.execute(
                "UPDATE dancer_groups SET is_archived=1, updated_at=? WHERE session_id=? AND group_number=?",
                (now, session_id, group_number),
            )
        for group_id in ids:
            self._publish("dancer_groups", "update", session_id, group_id, {"is_archived": True})
        return len(ids)

    # ==================== SCORES & SUBMISSIONS ====================

    def record_submission(self, group_id: str, judge_id: str, entries: List[ScoreEntry]) -> ScoreSubmission:
        """
        Insert a judge's score batch and its submission marker atomically

        Raises:
            ConflictError: a submission for (group, judge) already exists; the
                whole batch is rolled back so no duplicate Score rows remain
        """
        now = utc_now()
        submission = ScoreSubmission(
            id=new_id(), group_id=group_id, judge_id=judge_id,
            score_count=len(entries), submitted_at=now
        )
        columns = ", ".join(SCORE_CATEGORIES)
        placeholders = ",".join("?" for _ in SCORE_CATEGORIES)
        try:
            with self.transaction() as conn:
                conn.executemany(
                    f"INSERT INTO scores(id, group_id, judge_id, dancer_id, {columns}, created_at, updated_at) "
                    f"VALUES(?,?,?,?,{placeholders},?,?)",
                    [
                        (new_id(), group_id, judge_id, e.dancer_id,
                         *(getattr(e, c) for c in SCORE_CATEGORIES), now, now)
                        for e in entries
                    ],
                )
                conn.execute(
                    "INSERT INTO score_submissions(id, group_id, judge_id, score_count, submitted_at) "
                    "VALUES(?,?,?,?,?)",
                    (submission.id, group_id, judge_id, submission.score_count, now),
                )
        except sqlite3.IntegrityError as e:
            if "score_submissions" in str(e):
                raise ConflictError(
                    "already_submitted", "Scores already submitted for this group"
                ) from e
            raise NotFoundError(f"Unknown dancer or judge in submission: {e}") from e

        group = self.get_group(group_id)
        if group is not None:
            self._publish("score_submissions", "insert", group.session_id, submission.id, submission.model_dump())
        return submission

    def get_submission(self, group_id: str, judge_id: str) -> Optional[ScoreSubmission]:
        row = self._fetch_one(
            "SELECT * FROM score_submissions WHERE group_id=? AND judge_id=?", (group_id, judge_id)
        )
        return ScoreSubmission(**dict(row)) if row else None

    def list_submissions(self, group_id: Optional[str] = None,
                         judge_id: Optional[str] = None) -> List[ScoreSubmission]:
        query, params = "SELECT * FROM score_submissions WHERE 1=1", []
        if group_id:
            query += " AND group_id=?"
            params.append(group_id)
        if judge_id:
            query += " AND judge_id=?"
            params.append(judge_id)
        return [ScoreSubmission(**dict(r)) for r in self._fetch_all(query + " ORDER BY submitted_at", params)]

    def count_submitted_judges(self, group_id: str, active_only: bool = True) -> int:
        """Distinct judges with a submission for the group (by default only still-active ones)"""
        query = (
            "SELECT COUNT(DISTINCT s.judge_id) AS n FROM score_submissions s "
            "JOIN judges j ON j.id = s.judge_id WHERE s.group_id=?"
        )
        if active_only:
            query += " AND j.is_active=1"
        row = self._fetch_one(query, (group_id,))
        return row["n"]

    def get_score(self, score_id: str) -> Optional[Score]:
        row = self._fetch_one("SELECT * FROM scores WHERE id=?", (score_id,))
        return Score(**dict(row)) if row else None

    def list_scores(self, group_id: Optional[str] = None, judge_id: Optional[str] = None,
                    dancer_id: Optional[str] = None, session_id: Optional[str] = None) -> List[Score]:
        query = "SELECT s.* FROM scores s JOIN dancer_groups g ON g.id = s.group_id WHERE 1=1"
        params: List[Any] = []
        for column, value in (("s.group_id", group_id), ("s.judge_id", judge_id),
                              ("s.dancer_id", dancer_id), ("g.session_id", session_id)):
            if value:
                query += f" AND {column}=?"
                params.append(value)
        return [Score(**dict(r)) for r in self._fetch_all(query + " ORDER BY s.created_at", params)]

    def update_score(self, score_id: str, **values: Optional[float]) -> Score:
        values["updated_at"] = utc_now()
        assignments = ", ".join(f"{k}=?" for k in values)
        if not self._execute(f"UPDATE scores SET {assignments} WHERE id=?", (*values.values(), score_id)):
            raise NotFoundError("Score not found")
        return self.get_score(score_id)

    def retract_instance(self, group_id: str, delete_scores: bool = False) -> Tuple[DancerGroup, int]:
        """
        Mark an instance retracted, optionally deleting its Score and
        ScoreSubmission rows in the same transaction

        Returns:
            (updated group, number of score rows deleted)
        """
        now = utc_now()
        removed = 0
        with self.transaction() as conn:
            if not conn.execute(
                "UPDATE dancer_groups SET status='retracted', updated_at=? WHERE id=?", (now, group_id)
            ).rowcount:
                raise NotFoundError("Group not found")
            if delete_scores:
                removed = conn.execute("DELETE FROM scores WHERE group_id=?", (group_id,)).rowcount
                conn.execute("DELETE FROM score_submissions WHERE group_id=?", (group_id,))
        group = self.get_group(group_id)
        self._publish("dancer_groups", "update", group.session_id, group_id, group.model_dump())
        return group, removed

    # ==================== AUDIT LOG ====================

    def log_admin_action(self, session_id: str, action_type: str, details: Dict[str, Any]) -> AdminAction:
        action = AdminAction(
            id=new_id(), session_id=session_id, action_type=action_type,
            details=details, created_at=utc_now()
        )
        self._execute(
            "INSERT INTO admin_actions(id, session_id, action_type, details, created_at) VALUES(?,?,?,?,?)",
            (action.id, session_id, action_type, json.dumps(details), action.created_at),
        )
        return action

    def list_admin_actions(self, session_id: str) -> List[AdminAction]:
        rows = self._fetch_all(
            "SELECT * FROM admin_actions WHERE session_id=? ORDER BY created_at", (session_id,)
        )
        return [AdminAction(**{**dict(r), "details": json.loads(r["details"])}) for r in rows]
