"""
Error types raised by the Puckstats data layer.

Absent rows are not errors here: get-style calls return None and
update/delete calls return False. Exceptions are reserved for writes
that cannot be applied:

- ValidationError: a caller-supplied value breaks a local rule
- ReferentialError: a referenced row does not exist
- ConflictError: a uniqueness constraint rejected a hard create
- NotFoundError: an operation needs a row that is missing

Anything else coming out of SQLAlchemy (lost connections and so on)
propagates unchanged.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError


class PuckstatsError(Exception):
    """Base class for all data layer errors."""


class ValidationError(PuckstatsError):
    """A value violates a local constraint (negative score, bad period...)."""


class NotFoundError(PuckstatsError):
    """An operation required a row that does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found with id: {entity_id}")


class ReferentialError(PuckstatsError):
    """
    A write referenced a row that does not exist.

    ``entity`` names the reference that failed (e.g. 'match', 'team',
    'scorer', 'assist1') so callers can tell a bad player id from a bad
    match id. It is None when the database rejected the write without
    saying which foreign key was at fault.
    """

    def __init__(self, entity: Optional[str], entity_id: Optional[int] = None):
        self.entity = entity
        self.entity_id = entity_id
        if entity is None:
            message = "write references a row that does not exist"
        else:
            message = f"{entity} does not exist with id: {entity_id}"
        super().__init__(message)


class ConflictError(PuckstatsError):
    """A uniqueness constraint was violated by a non-idempotent create."""


# PostgreSQL SQLSTATE codes for integrity violations
_PG_UNIQUE_VIOLATION = "23505"
_PG_FOREIGN_KEY_VIOLATION = "23503"


def from_integrity_error(exc: IntegrityError) -> PuckstatsError:
    """
    Translate a database integrity failure into the matching error type.

    Stores check references up front, so this only fires when a row
    vanished in between or a constraint caught something the checks
    did not. Unrecognized integrity failures (CHECK constraints and the
    like) become ValidationError.
    """
    pgcode = getattr(exc.orig, "pgcode", None)
    message = str(exc.orig).lower()

    if pgcode == _PG_UNIQUE_VIOLATION or "unique" in message:
        return ConflictError(str(exc.orig))
    if pgcode == _PG_FOREIGN_KEY_VIOLATION or "foreign key" in message:
        return ReferentialError(None)
    return ValidationError(str(exc.orig))
