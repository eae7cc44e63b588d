"""Site script contract.

A site script knows how to log in to one provider and list its billing
documents. The orchestrator instantiates one script per account per fetch
session and drives it through authentication, an optional out-of-band code
or security answer, and the fetch itself.

Example:
    class ExampleScript(SiteScript):
        name = "Example"
        requires_two_factor = True

        async def authenticate(self):
            await self.page.goto(LOGIN_URL)
            ...
            return self.fetch

        async def fetch(self, code: str = "") -> list[FetchedDocument]:
            ...
"""

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from invoicehub.services.account_service import ResolvedAccount
from invoicehub.services.settings_service import SettingsSnapshot


class Artifact(ABC):
    """Binary content of one fetched document, held in memory until exported."""

    @abstractmethod
    async def save_as(self, path: Path) -> None:
        """Write the artifact to ``path``."""

    @abstractmethod
    async def read_bytes(self) -> bytes:
        """Return the artifact content."""


@dataclass
class BytesArtifact(Artifact):
    """Artifact whose content is already in memory."""

    content: bytes = field(repr=False)

    async def save_as(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).write_bytes, self.content)

    async def read_bytes(self) -> bytes:
        return self.content


@dataclass
class FileArtifact(Artifact):
    """Artifact downloaded to a temporary file by the browser."""

    path: Path

    async def save_as(self, path: Path) -> None:
        await asyncio.to_thread(shutil.copyfile, self.path, path)

    async def read_bytes(self) -> bytes:
        return await asyncio.to_thread(Path(self.path).read_bytes)


@dataclass(frozen=True)
class DateRange:
    """Inclusive date filter. An open bound matches everything on that side."""

    start: date | None = None
    end: date | None = None

    def contains(self, day: date | None) -> bool:
        if day is None:
            return True
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass
class FetchedDocument:
    """One document reported by a site script.

    Attributes:
        description: Human readable description from the source.
        issued_on: Issue date, when the source exposes one.
        account_name: Display name of the account it came from.
        file_name: Suggested file name.
        artifact: The document content.
    """

    description: str
    issued_on: date | None
    account_name: str
    file_name: str
    artifact: Artifact


@dataclass
class ScriptContext:
    """Everything a site script gets for one account fetch."""

    account: ResolvedAccount
    settings: SettingsSnapshot
    date_range: DateRange
    page: Any = None
    logger: logging.LoggerAdapter | None = None


Continuation = Callable[[str], Awaitable[list[FetchedDocument]]]


class SiteScript(ABC):
    """Base class for provider site scripts.

    Class attributes:
        name: Human readable provider name.
        requires_two_factor: Whether the provider must be logged in to
            through :meth:`authenticate` before fetching.

    Instance attributes a script sets from :meth:`authenticate`:
        requires_security_question: A security question must be answered.
        security_question: The question text shown to the user.
        authenticated: Login completed without needing a code.
    """

    name: str = ""
    requires_two_factor: bool = False

    def __init__(self, context: ScriptContext) -> None:
        self.context = context
        self.requires_security_question = False
        self.security_question = ""
        self.authenticated = False
        self.logger = context.logger or logging.LoggerAdapter(
            logging.getLogger(__name__), {"account": context.account.name}
        )

    @property
    def account(self) -> ResolvedAccount:
        return self.context.account

    @property
    def page(self) -> Any:
        return self.context.page

    async def authenticate(self) -> Continuation:
        """Log in. Returns the coroutine to resume with a code or answer."""
        return self.fetch

    @abstractmethod
    async def fetch(self, code: str = "") -> list[FetchedDocument]:
        """List the account's documents within the context date range.

        Raises:
            AuthenticationFailed: If the code or answer was rejected.
            FetchFailed: If listing or downloading documents failed.
        """
