"""HTTP client for a running InvoiceHub server.

Fetched document content only lives in the server process that fetched it,
so exporting documents and answering code requests from another terminal
goes through the REST API. Error responses raise InvoiceHubClientError,
never typer.Exit, so the client is reusable outside the CLI.
"""

import logging

import httpx

logger = logging.getLogger(__name__)


class InvoiceHubClientError(Exception):
    """Raised on transport failures and non-2xx responses."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class HttpClient:
    """Async client for the /api/v1 endpoints."""

    def __init__(self, base_url: str = "http://127.0.0.1:8000", timeout: float = 30.0):
        self._base_url = base_url
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HttpClient":
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.aclose()

    def _raise_for_status(self, resp: httpx.Response) -> None:
        """Raise InvoiceHubClientError on non-2xx responses."""
        if resp.status_code >= 400:
            try:
                body = resp.json()
                detail = body.get("message") or body.get("detail") or resp.text
            except ValueError:
                detail = resp.text
            raise InvoiceHubClientError(message=str(detail), status_code=resp.status_code)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is None:
            raise InvoiceHubClientError("Client is not open")
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise InvoiceHubClientError(f"Cannot reach server at {self._base_url}: {e}") from e
        self._raise_for_status(resp)
        return resp

    async def export_document(self, document_id: str) -> str:
        """Save a document on the server side. Returns the written path."""
        resp = await self._request("POST", f"/api/v1/documents/{document_id}/export")
        return resp.json()["path"]

    async def pending_codes(self) -> list[dict]:
        resp = await self._request("GET", "/api/v1/fetch/codes")
        return resp.json()

    async def submit_code(self, account_id: str, code: str) -> None:
        await self._request("POST", f"/api/v1/fetch/codes/{account_id}", json={"code": code})
