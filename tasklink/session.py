"""
Session Tracking
================

Keeps a small JSON log of what happened during an editing session: which
files changed and which tasks were touched. The markdown report shows it.
"""

from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from tasklink.config import utc_now
from tasklink.utils.file import read_json, write_json

SESSION_FILE = ".tasklink-session.json"


class Session(BaseModel):
    start_time: str = Field(default_factory=utc_now)
    end_time: Optional[str] = None
    files_changed: list[str] = Field(default_factory=list)
    tasks_modified: list[int] = Field(default_factory=list)
    tasks_created: list[int] = Field(default_factory=list)
    summary: Optional[str] = None


class SessionTracker:
    """
    Persists the current session in the project directory.

    Attributes:
        path (Path): Location of the session file
    """

    def __init__(self, project_dir: Path | None = None):
        self.path = Path(project_dir or Path.cwd()) / SESSION_FILE

    def load(self) -> Session:
        """Current session, starting a new one when none is stored."""
        data = read_json(self.path)
        if data is not None:
            try:
                return Session.model_validate(data)
            except ValidationError as error:
                logger.warning(f"Discarding invalid session file {self.path}: {error}")
        return Session()

    def save(self, session: Session) -> None:
        write_json(self.path, session.model_dump())

    def record_file(self, file_path: str) -> Session:
        session = self.load()
        if file_path not in session.files_changed:
            session.files_changed.append(file_path)
            self.save(session)
        return session

    def record_tasks(self, task_ids: list[int], created: bool = False) -> Session:
        session = self.load()
        target = session.tasks_created if created else session.tasks_modified
        new_ids = [task_id for task_id in task_ids if task_id not in target]
        if new_ids:
            target.extend(new_ids)
            self.save(session)
        return session

    def end(self, summary: Optional[str] = None) -> Session:
        session = self.load()
        session.end_time = utc_now()
        session.summary = summary
        self.save(session)
        return session

    def reset(self) -> None:
        self.path.unlink(missing_ok=True)
