"""Elevated store access for the invitation services.

Invitation rows are read and written on behalf of callers who cannot see
them through their own account (an unauthenticated visitor following a link,
a course leader inviting a student). Services that need that take an
``ElevatedAccess`` in their constructor; ordinary handlers only get a plain
session from ``get_db`` and never hold one.
"""
from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db


@dataclass(frozen=True)
class ElevatedAccess:
    db: Session


def get_elevated_access(db: Session = Depends(get_db)) -> ElevatedAccess:
    return ElevatedAccess(db=db)
