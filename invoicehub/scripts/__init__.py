"""Site scripts: the per-provider contract, the registry and the catalog."""

from invoicehub.scripts.base import (
    Artifact,
    BytesArtifact,
    Continuation,
    DateRange,
    FetchedDocument,
    FileArtifact,
    ScriptContext,
    SiteScript,
)
from invoicehub.scripts.catalog import ProviderInfo, get_provider, get_providers
from invoicehub.scripts.registry import ENTRY_POINT_GROUP, ScriptRegistry

__all__ = [
    "Artifact",
    "BytesArtifact",
    "FileArtifact",
    "Continuation",
    "DateRange",
    "FetchedDocument",
    "ScriptContext",
    "SiteScript",
    "ScriptRegistry",
    "ENTRY_POINT_GROUP",
    "ProviderInfo",
    "get_provider",
    "get_providers",
]
