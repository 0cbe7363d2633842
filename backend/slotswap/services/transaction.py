"""
Transaction boundary for multi-record writes.

All validate -> write -> commit sequences of the coordinator run inside
``atomic``: either every change in the block is committed, or the session
is rolled back and nothing persists.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .errors import SlotSwapError, StateError, StorageError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, operation: str) -> Iterator[Session]:
    """
    Run a block as one all-or-nothing unit on ``db``.

    - Domain errors raised in the block roll back and propagate unchanged.
    - A versioned UPDATE that matched no row (another transaction committed
      first) becomes a retryable StateError.
    - Any other SQLAlchemy failure becomes StorageError.
    """
    try:
        yield db
        db.commit()
    except SlotSwapError:
        db.rollback()
        raise
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"{operation}: concurrent modification detected, aborted ({e})")
        raise StateError(
            "The slot or swap request was modified concurrently; reload and retry",
            retryable=True,
        ) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"{operation}: storage failure, transaction aborted")
        raise StorageError("Storage failure; no changes were saved") from e
