"""Save and restore in-progress form data across a checkout redirect."""

from __future__ import annotations

import base64
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from career_matcher.client.state import CVFile, FormState
from career_matcher.models import ServiceOption

_LOGGER = logging.getLogger(__name__)

EXPIRY_SECONDS = 60 * 60


@dataclass(frozen=True)
class RestoredForm:
    role: str
    job_description: str
    selected_option: Optional[ServiceOption]
    cv_file: Optional[CVFile]


class FormPersistence:
    """JSON file store with a one-hour expiry; the CV travels as base64."""

    def __init__(self, path, clock: Callable[[], float] = time.time) -> None:
        self.path = Path(path)
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def save(self, state: FormState) -> None:
        data = {
            "role": state.role or "",
            "jobDescription": state.job_description or "",
            "selectedOption": state.selected_option.value if state.selected_option else None,
            "timestamp": self._now_ms(),
        }
        if state.cv_file is not None:
            data["cvFile"] = {
                "data": base64.b64encode(state.cv_file.content).decode("ascii"),
                "type": state.cv_file.content_type,
                "name": state.cv_file.name,
                "size": state.cv_file.size,
            }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")
        _LOGGER.debug("Form data saved to %s", self.path)

    def restore(self) -> Optional[RestoredForm]:
        """Return the saved form, or None when it is missing, unreadable or expired."""
        if not self.path.exists():
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if self._now_ms() - int(data["timestamp"]) > EXPIRY_SECONDS * 1000:
                _LOGGER.info("Stored form data expired, clearing")
                self.clear()
                return None

            cv_file = None
            if data.get("cvFile"):
                stored = data["cvFile"]
                cv_file = CVFile(
                    name=stored["name"],
                    content=base64.b64decode(stored["data"]),
                    content_type=stored["type"],
                )
            return RestoredForm(
                role=data.get("role") or "",
                job_description=data.get("jobDescription") or "",
                selected_option=ServiceOption.parse(data.get("selectedOption")),
                cv_file=cv_file,
            )
        except (ValueError, KeyError, TypeError) as exc:
            _LOGGER.error("Error restoring form data: %s", exc)
            self.clear()
            return None

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    def exists(self) -> bool:
        return self.path.exists()
