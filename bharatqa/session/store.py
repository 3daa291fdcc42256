"""
Session Store
=============
Explicit holder for the logged-in company identity, persisted as JSON.

Write contract (write() is the only writer):
    mode="replace": the stored identity becomes exactly the given company
    mode="merge"  : non-null fields of the update overlay the stored
                     identity; the ids must match and a session must exist

Nothing else mutates the stored company. The file is rewritten wholesale
on every write; there is no locking.
"""
import json
import logging
import os
from typing import Any, Dict, Literal, Optional, Union

from bharatqa.core.config import SESSION_FILE
from bharatqa.core.errors import SessionError
from bharatqa.models.company import Company

logger = logging.getLogger(__name__)

WriteMode = Literal["replace", "merge"]


class SessionStore:
    """Company session context passed to whoever needs the current identity."""

    def __init__(self, path: Optional[str] = SESSION_FILE) -> None:
        self.path = path
        self._company: Optional[Company] = None

    @property
    def current(self) -> Optional[Company]:
        return self._company

    @property
    def is_authenticated(self) -> bool:
        return self._company is not None

    def load(self) -> Optional[Company]:
        """Read the persisted session; unreadable files start a fresh session."""
        if not self.path or not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._company = Company.model_validate(data)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            self._company = None
        return self._company

    def write(self, company: Union[Company, Dict[str, Any]], mode: WriteMode = "replace") -> Company:
        if isinstance(company, dict):
            update = company
        else:
            update = company.model_dump(exclude_unset=(mode == "merge"))

        if mode == "replace":
            new_company = Company.model_validate(update)
        elif mode == "merge":
            if self._company is None:
                raise SessionError("Cannot merge into an empty session")
            if "id" in update and str(update["id"]) != str(self._company.id):
                raise SessionError(
                    f"Session belongs to company {self._company.id}, got update for {update['id']}"
                )
            merged = self._company.model_dump()
            merged.update({k: v for k, v in update.items() if v is not None})
            new_company = Company.model_validate(merged)
        else:
            raise SessionError(f"Unknown session write mode: {mode}")

        self._company = new_company
        self._persist()
        logger.info("Session %s for company %s", "replaced" if mode == "replace" else "merged", new_company.id)
        return new_company

    def clear(self) -> None:
        self._company = None
        if self.path and os.path.exists(self.path):
            os.remove(self.path)
        logger.info("Session cleared")

    def _persist(self) -> None:
        if not self.path:
            return
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._company.model_dump(mode="json"), f, indent=2)
