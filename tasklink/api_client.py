"""
HTTP client for the remote task-tracking service.

Every endpoint answers with a ``{"data": ...}`` envelope under
``<base_url>/api/v1``.
"""

from typing import Any, Iterable, Optional

import requests
from loguru import logger
from pydantic import BaseModel, ValidationError

from tasklink.config import GlobalConfig
from tasklink.core.keywords import strip_extension
from tasklink.core.task import Project, Task, TaskStatus
from tasklink.errors import ApiError

DEFAULT_TIMEOUT = 15.0


def parse_model(model: type[BaseModel], data: Any, source: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as error:
        raise ApiError(f"{source} returned an unexpected payload: {error.error_count()} invalid field(s)") from error


class TaskApiClient:
    def __init__(
        self,
        config: GlobalConfig,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.config = config
        self.base_url = f"{config.base_url.rstrip('/')}/api/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {config.api_key}:{config.api_secret}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"API Request: {method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as error:
            raise ApiError(f"Could not reach {self.config.base_url}: {error}") from error

        if response.status_code == 401:
            raise ApiError(
                "Invalid API credentials. Please check your API key and secret.", status_code=401
            )
        if response.status_code == 403:
            raise ApiError("Access denied. Please check your subscription status.", status_code=403)
        try:
            response.raise_for_status()
        except requests.HTTPError as error:
            raise ApiError(
                f"{method} {path} failed with status {response.status_code}",
                status_code=response.status_code,
            ) from error

        if response.status_code == 204 or not response.content:
            return None
        try:
            payload = response.json()
        except ValueError as error:
            raise ApiError(f"{method} {path} returned invalid JSON") from error
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    # Projects

    def get_projects(self) -> list[Project]:
        return [parse_model(Project, item, "GET /projects") for item in self._request("GET", "/projects") or []]

    def get_project(self, project_id: str) -> Project:
        return parse_model(Project, self._request("GET", f"/projects/{project_id}"), f"GET /projects/{project_id}")

    def create_project(self, name: str, description: Optional[str] = None) -> Project:
        data = self._request("POST", "/projects", json={"name": name, "description": description})
        return parse_model(Project, data, "POST /projects")

    def update_project(self, project_id: str, **updates) -> Project:
        data = self._request("PUT", f"/projects/{project_id}", json=updates)
        return parse_model(Project, data, f"PUT /projects/{project_id}")

    def delete_project(self, project_id: str) -> None:
        self._request("DELETE", f"/projects/{project_id}")

    # Tasks

    def get_tasks(
        self,
        project_id: str,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assignee_id: Optional[int] = None,
        tags: Optional[list[str]] = None,
        due_before: Optional[str] = None,
        overdue: Optional[bool] = None,
    ) -> list[Task]:
        """
        Fetch the tasks of a project, optionally filtered by the service.

        Args:
            project_id: Remote project identifier
            status: Only tasks with this status
            priority: Only tasks with this priority
            assignee_id: Only tasks assigned to this user
            tags: Only tasks carrying these tags
            due_before: Only tasks due before this date (YYYY-MM-DD)
            overdue: Only overdue tasks

        Returns:
            list[Task]: Tasks in the order the service returned them
        """
        filters = {
            "status": status,
            "priority": priority,
            "assignee_id": assignee_id,
            "tags": ",".join(tags) if tags else None,
            "due_before": due_before,
            "overdue": str(overdue).lower() if overdue is not None else None,
        }
        params = {key: value for key, value in filters.items() if value is not None}
        data = self._request("GET", f"/projects/{project_id}/tasks", params=params or None)
        return [parse_model(Task, item, f"GET /projects/{project_id}/tasks") for item in data or []]

    def get_task(self, task_id: int) -> Task:
        return parse_model(Task, self._request("GET", f"/tasks/{task_id}"), f"GET /tasks/{task_id}")

    def create_task(self, project_id: str, **fields) -> Task:
        data = self._request("POST", f"/projects/{project_id}/tasks", json=fields)
        return parse_model(Task, data, f"POST /projects/{project_id}/tasks")

    def update_task(self, task_id: int, **updates) -> Task:
        return parse_model(Task, self._request("PUT", f"/tasks/{task_id}", json=updates), f"PUT /tasks/{task_id}")

    def update_task_status(self, task_id: int, status: TaskStatus | str) -> Task:
        status = TaskStatus(status)
        data = self._request("PATCH", f"/tasks/{task_id}/status", json={"status": status.value})
        return parse_model(Task, data, f"PATCH /tasks/{task_id}/status")

    def delete_task(self, task_id: int) -> None:
        self._request("DELETE", f"/tasks/{task_id}")

    # Utility methods

    def test_connection(self) -> bool:
        try:
            self.get_projects()
            return True
        except ApiError as error:
            logger.debug(f"Connection test failed: {error}")
            return False

    def find_tasks_by_keywords(self, project_id: str, keywords: Iterable[str]) -> list[Task]:
        """Tasks whose text contains any of the keywords, in service order."""
        keywords = [keyword.lower() for keyword in keywords if keyword]
        return [
            task
            for task in self.get_tasks(project_id)
            if any(keyword in task.searchable_text.lower() for keyword in keywords)
        ]

    def find_tasks_by_files(self, project_id: str, file_paths: Iterable[str]) -> list[Task]:
        keywords = [
            strip_extension(file_path.replace("\\", "/").rsplit("/", 1)[-1]) for file_path in file_paths
        ]
        return self.find_tasks_by_keywords(project_id, keywords)
