"""
HTTP client for the TwistList API.

Keeps the session cookie in a requests.Session. The token is also kept
for the Authorization header, since secure cookies are not sent over
plain http during local development.
"""
from typing import Any, Dict, List, Optional

import requests

from twistlist.utils.logger import get_logger

logger = get_logger(__name__)

AUTH_COOKIE_NAME = "auth_token"


class APIError(Exception):
    """
    Non-2xx response from the API.
    """

    def __init__(self, status_code: int, message: str, error_code: Optional[str] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.error_code = error_code

    @classmethod
    def from_response(cls, response: requests.Response) -> "APIError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("message") or body.get("detail") or response.reason or "Request failed"
        return cls(response.status_code, str(message), body.get("error_code"))


class SessionExpiredError(APIError):
    """
    401 from the API. The local session has been cleared; sign in again.
    """


class TwistListClient:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None

    # --- Transport ---

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers.setdefault("Authorization", f"Bearer {self.token}")

        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=headers,
            timeout=self.timeout,
            **kwargs,
        )

        if response.status_code == 401:
            logger.info("Session expired on %s %s", method, path)
            self.clear_session()
            error = APIError.from_response(response)
            raise SessionExpiredError(error.status_code, error.message, error.error_code)
        if not response.ok:
            raise APIError.from_response(response)

        if not response.content:
            return None
        return response.json()

    def _remember_token(self, response_body: Optional[Dict[str, Any]] = None):
        token = (response_body or {}).get("access_token") or self.session.cookies.get(AUTH_COOKIE_NAME)
        if token:
            self.token = token

    def clear_session(self):
        self.token = None
        self.session.cookies.clear()

    # --- Auth ---

    def signup(self, username: str, email: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", "/auth/signup", json={
            "username": username,
            "email": email,
            "password": password,
        })
        self._remember_token()
        return body

    def signin(self, email_or_username: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", "/auth/signin", json={
            "email_or_username": email_or_username,
            "password": password,
        })
        self._remember_token(body)
        return body

    def refresh(self) -> Dict[str, Any]:
        body = self._request("POST", "/auth/refresh")
        self._remember_token(body)
        return body

    def logout(self) -> Dict[str, Any]:
        try:
            return self._request("POST", "/auth/logout")
        finally:
            self.clear_session()

    # --- Users ---

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/users/profile")

    def update_profile(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", "/users/profile", json=updates)

    def search_users(self, query: str) -> List[Dict[str, Any]]:
        return self._request("GET", "/users/search", params={"q": query})

    # --- Teams ---

    def list_teams(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/teams")

    def create_team(self, team_name: str, **fields) -> Dict[str, Any]:
        return self._request("POST", "/teams", json={"team_name": team_name, **fields})

    def add_member(self, team_id: int, username_or_email: str) -> Dict[str, Any]:
        return self._request("POST", f"/teams/{team_id}/members", json={"username_or_email": username_or_email})

    def request_join(self, team_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/teams/{team_id}/join")

    def accept_request(self, team_id: int, request_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/teams/{team_id}/requests/{request_id}/accept")

    def reject_request(self, team_id: int, request_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/teams/{team_id}/requests/{request_id}/reject")

    def leave_team(self) -> Dict[str, Any]:
        return self._request("POST", "/teams/leave")

    def delete_team(self, team_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/teams/{team_id}")

    # --- Projects ---

    def list_projects(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/projects")

    def create_project(self, name: str, **fields) -> Dict[str, Any]:
        return self._request("POST", "/projects", json={"name": name, **fields})

    # --- Tasks ---

    def get_tasks(self, project_id: Optional[int] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {}
        if project_id is not None:
            params["project_id"] = project_id
        if status is not None:
            params["status"] = status
        return self._request("GET", "/tasks", params=params)

    def get_task(self, task_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/tasks/{task_id}")

    def create_task(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/tasks", json=fields)

    def update_task(self, task_id: int, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/tasks/{task_id}", json=updates)

    def delete_task(self, task_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/tasks/{task_id}")

    def reorder_tasks(self, positions: List[Dict[str, int]]) -> List[Dict[str, Any]]:
        return self._request("PATCH", "/tasks/reorder", json=positions)
