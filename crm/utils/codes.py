"""
Daily sequential codes for students, applications and event registrations.

Format: {TYPE}-{YYMMDD}-{SEQ}
Example: APP-250307-001, EVT-250307-0001

The sequence restarts every calendar day and is derived from the greatest
code already stored for the day, so there is no counter table and nothing
is locked. Two writers racing on the same prefix can both read the same
"latest" code; the existence checks and the unique constraint on the code
column make sure only one of them keeps it.
"""
import logging
import random
import time
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from crm import settings
from crm.database.config.db import utc_now
from crm.database.models.application import Application
from crm.database.models.event import EventRegistration
from crm.database.models.student import Student
from crm.exceptions import CodeAllocationFailed, StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodeSequence:
    """Where a code lives and how it is shaped."""

    model: type
    column: str
    type_prefix: str
    width: int = 3

    @property
    def code_column(self):
        return getattr(self.model, self.column)


APPLICATION_CODES = CodeSequence(Application, "application_code", "APP", 3)
STUDENT_CODES = CodeSequence(Student, "student_code", "STD", 3)
REGISTRATION_CODES = CodeSequence(EventRegistration, "registration_code", "EVT", 4)


def daily_prefix(type_prefix: str, day: date) -> str:
    """Return the day bucket prefix, e.g. ``APP-250307-``."""
    return f"{type_prefix}-{day:%y%m%d}-"


def format_code(prefix: str, seq: int, width: int) -> str:
    return f"{prefix}{seq:0{width}d}"


def parse_sequence(code: Optional[str]) -> int:
    """Return the trailing numeric segment of a code, or 0 if it has none."""
    if not code:
        return 0
    tail = code.rsplit("-", 1)[-1]
    try:
        return int(tail)
    except ValueError:
        return 0


def latest_code(db: Session, sequence: CodeSequence, prefix: str) -> Optional[str]:
    """
    Greatest stored code for a day prefix.

    Longer codes sort first so a sequence that outgrew its padding
    (``-1000`` after ``-999``) is still seen as the latest.
    """
    column = sequence.code_column
    row = (
        db.query(column)
        .filter(column.like(f"{prefix}%"))
        .order_by(func.length(column).desc(), column.desc())
        .limit(1)
        .first()
    )
    return row[0] if row else None


def code_exists(db: Session, sequence: CodeSequence, code: str) -> bool:
    column = sequence.code_column
    return db.query(column).filter(column == code).first() is not None


def next_code(
    db: Session,
    sequence: CodeSequence,
    day: date,
    floor: int = 0,
) -> str:
    """
    Compute the next free-looking code for ``day``.

    Args:
        db: Database session
        sequence: Which table/column and prefix to allocate for
        day: Day bucket of the code
        floor: Lowest sequence number acceptable (used after a lost race)

    Returns:
        A candidate code that did not exist at the time of the last check.
        It can still be taken by a concurrent writer before insert.
    """
    prefix = daily_prefix(sequence.type_prefix, day)
    next_seq = max(parse_sequence(latest_code(db, sequence, prefix)) + 1, floor, 1)
    candidate = format_code(prefix, next_seq, sequence.width)

    for _ in range(settings.CODE_EXISTENCE_CHECKS):
        if not code_exists(db, sequence, candidate):
            break
        logger.debug("Code %s already taken, moving ahead", candidate)
        next_seq += 1
        candidate = format_code(prefix, next_seq, sequence.width)

    return candidate


def _backoff(attempt: int) -> None:
    base = settings.CODE_ALLOCATION_BACKOFF_SECONDS
    if base > 0:
        time.sleep(random.uniform(0, base * (2 ** attempt)))


def create_with_code(
    db: Session,
    sequence: CodeSequence,
    entity,
    day: Optional[date] = None,
):
    """
    Assign a daily code to ``entity`` and insert it.

    The insert runs inside a SAVEPOINT so a uniqueness violation on the code
    only undoes this row: the code is recomputed (never below the failed
    candidate + 1) and the insert retried after a short jittered backoff.
    Without an explicit ``day`` the code is bucketed on the entity's
    ``created_at``, which is stamped here when unset.
    The caller owns the surrounding transaction and commits it.

    Raises:
        CodeAllocationFailed: every attempt collided with an existing code
        StoreUnavailable: the database connection failed
        IntegrityError: the row violates a constraint other than the code
    """
    if day is None:
        if entity.created_at is None:
            entity.created_at = utc_now()
        day = entity.created_at.date()
    attempts = settings.CODE_INSERT_ATTEMPTS
    floor = 0

    for attempt in range(attempts):
        try:
            candidate = next_code(db, sequence, day, floor=floor)
            setattr(entity, sequence.column, candidate)
            with db.begin_nested():
                db.add(entity)
                db.flush()
        except IntegrityError:
            if not code_exists(db, sequence, candidate):
                raise
            logger.warning(
                "Lost race for code %s (attempt %d/%d)", candidate, attempt + 1, attempts
            )
            floor = parse_sequence(candidate) + 1
            _backoff(attempt)
            continue
        except OperationalError as exc:
            raise StoreUnavailable(str(exc.orig)) from exc

        logger.debug("Allocated code %s", candidate)
        return entity

    prefix = daily_prefix(sequence.type_prefix, day)
    logger.warning("Giving up on code allocation for %s after %d attempts", prefix, attempts)
    raise CodeAllocationFailed(prefix, attempts)
