"""HTTP client for the Book Notion REST API.

The gateway keeps an ordered list of candidate base addresses and moves on
to the next one only when the transport fails; an HTTP error response is
raised as :class:`ApiError` without retrying.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from booknotion.client.config import ClientSettings
from booknotion.client.storage import API_URL_KEY, AUTH_TOKEN_KEY, ClientStorage

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """Базовая ошибка клиента: код, сообщение, HTTP статус и тело ответа"""

    def __init__(
        self,
        code: str,
        message: str,
        status: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.data = data or {}

    @property
    def error(self) -> str:
        return self.data.get("error", self.message)


class ApiError(ClientError):
    """Ответ сервера с ошибкой, код и сообщение сохраняются как есть"""

    @classmethod
    def from_response(cls, status: int, data: Any) -> "ApiError":
        if not isinstance(data, dict):
            data = {"error": str(data)}
        message = data.get("message") or data.get("error") or "Request failed"
        return cls(data.get("code") or "HTTP_ERROR", message, status, data)


class NetworkError(ClientError):
    """Ни один из адресов API не ответил"""

    def __init__(self, message: str):
        super().__init__("NETWORK_ERROR", message)


def normalize_api_url(url: str) -> str:
    url = url.strip().rstrip("/")
    return url if url.endswith("/api") else f"{url}/api"


def _unique(urls: List[Optional[str]]) -> List[str]:
    seen = []
    for url in urls:
        if url and url not in seen:
            seen.append(url)
    return seen


class ApiGateway:
    """Обертка над REST API с резервными адресами и Bearer токеном"""

    def __init__(
        self,
        settings: ClientSettings,
        storage: ClientStorage,
        session: Optional[Any] = None,
    ):
        self.settings = settings
        self.storage = storage
        self.session = session or requests.Session()
        self._active_url: Optional[str] = None

    # --- адреса ---

    def default_urls(self) -> List[str]:
        if self.settings.is_hosted:
            return _unique(list(self.settings.hosted_urls))
        local = self.settings.local_url.rstrip("/")
        return _unique([local, local.replace("localhost", "127.0.0.1")])

    def candidate_urls(self) -> List[str]:
        """Адреса в порядке перебора: рабочий, заданный пользователем, по умолчанию"""
        return _unique(
            [self._active_url, self.storage.get(API_URL_KEY)] + self.default_urls()
        )

    @property
    def base_url(self) -> str:
        return self.candidate_urls()[0]

    def set_api_url(self, url: str) -> str:
        """Сохраняет адрес API, заданный пользователем"""
        url = normalize_api_url(url)
        self.storage.set(API_URL_KEY, url)
        self._active_url = url
        return url

    # --- токен ---

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(AUTH_TOKEN_KEY)

    def is_authenticated(self) -> bool:
        return bool(self.token)

    def _remember_token(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if data.get("token"):
            self.storage.set(AUTH_TOKEN_KEY, data["token"])
        return data

    # --- запросы ---

    def request(
        self,
        method: str,
        endpoint: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        for base_url in self.candidate_urls():
            try:
                response = self.session.request(
                    method,
                    f"{base_url}{endpoint}",
                    json=json,
                    params=params or None,
                    headers=headers,
                    timeout=self.settings.timeout,
                )
            except requests.ReadTimeout as e:
                # Запрос уже отправлен, повтор на другой адрес может продублировать запись
                logger.warning(f"API at {base_url} did not respond in time: {e}")
                raise NetworkError(
                    f"The server at {base_url} did not respond in time."
                ) from e
            except requests.ConnectionError as e:
                # В том числе ConnectTimeout: соединение не установлено
                logger.warning(f"API at {base_url} is unreachable: {e}")
                continue

            if base_url != self._active_url:
                if self._active_url is not None:
                    logger.info(f"Switched API address to {base_url}")
                self._active_url = base_url
            return self._handle_response(response)

        raise NetworkError(
            "Could not connect to the server. Check that it is running "
            "or configure the API address."
        )

    @staticmethod
    def _handle_response(response: Any) -> Any:
        try:
            data = response.json()
        except ValueError:
            data = {"error": response.text or "Invalid response"}

        if not 200 <= response.status_code < 300:
            raise ApiError.from_response(response.status_code, data)
        return data

    def ping(self) -> bool:
        """Проверка доступности сервера через /health, без исключений"""
        try:
            self.request("GET", "/health")
        except ClientError as e:
            logger.info(f"API health check failed: {e.message}")
            return False
        return True

    # --- аутентификация ---

    def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        data = self.request(
            "POST",
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        return self._remember_token(data)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self.request("POST", "/auth/login", json={"email": email, "password": password})
        return self._remember_token(data)

    def logout(self) -> None:
        self.storage.remove(AUTH_TOKEN_KEY)

    def get_current_user(self) -> Dict[str, Any]:
        return self.request("GET", "/auth/me")

    def refresh_token(self) -> Dict[str, Any]:
        return self._remember_token(self.request("POST", "/auth/refresh"))

    # --- разделы ---

    def get_sections(self) -> List[Dict[str, Any]]:
        return self.request("GET", "/sections")

    def get_section(self, section_id: int) -> Dict[str, Any]:
        return self.request("GET", f"/sections/{section_id}")

    def create_section(self, name: str) -> Dict[str, Any]:
        return self.request("POST", "/sections", json={"name": name})

    def update_section(self, section_id: int, name: str) -> Dict[str, Any]:
        return self.request("PUT", f"/sections/{section_id}", json={"name": name})

    def delete_section(self, section_id: int) -> Dict[str, Any]:
        return self.request("DELETE", f"/sections/{section_id}")

    def get_section_notebooks(self, section_id: int) -> List[Dict[str, Any]]:
        return self.request("GET", f"/sections/{section_id}/notebooks")

    def get_section_stats(self, section_id: int) -> Dict[str, Any]:
        return self.request("GET", f"/sections/{section_id}/stats")

    # --- тетради ---

    def get_notebooks(self, section_id: Optional[int] = None) -> List[Dict[str, Any]]:
        return self.request("GET", "/notebooks", params={"section_id": section_id})

    def create_notebook(self, name: str, section_id: int, content: str = "") -> Dict[str, Any]:
        return self.request(
            "POST",
            "/notebooks",
            json={"name": name, "section_id": section_id, "content": content},
        )

    def get_notebook(self, notebook_id: int) -> Dict[str, Any]:
        return self.request("GET", f"/notebooks/{notebook_id}")

    def update_notebook(self, notebook_id: int, **fields: Any) -> Dict[str, Any]:
        body = {k: v for k, v in fields.items() if v is not None}
        return self.request("PUT", f"/notebooks/{notebook_id}", json=body)

    def update_notebook_content(self, notebook_id: int, content: str) -> Dict[str, Any]:
        return self.request("PATCH", f"/notebooks/{notebook_id}/content", json={"content": content})

    def delete_notebook(self, notebook_id: int) -> Dict[str, Any]:
        return self.request("DELETE", f"/notebooks/{notebook_id}")

    def duplicate_notebook(
        self,
        notebook_id: int,
        name: Optional[str] = None,
        section_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        body = {k: v for k, v in {"name": name, "section_id": section_id}.items() if v is not None}
        return self.request("POST", f"/notebooks/{notebook_id}/duplicate", json=body)

    def search_notebooks(
        self, query: str, section_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self.request(
            "GET", "/notebooks/search", params={"q": query, "section_id": section_id}
        )
