"""API route for the provider catalog."""

from fastapi import APIRouter, Depends

from invoicehub.api.deps import get_runtime
from invoicehub.api.schemas import ProviderResponse
from invoicehub.orchestrator.runtime import FetchRuntime
from invoicehub.scripts.catalog import get_providers

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("", response_model=list[ProviderResponse])
def list_providers(runtime: FetchRuntime = Depends(get_runtime)) -> list[ProviderResponse]:
    """List catalog providers, flagging those with an installed site script."""
    return [
        ProviderResponse(
            key=p.key,
            label=p.label,
            url=p.url,
            credentials=p.credentials,
            supported=p.key in runtime.registry,
        )
        for p in get_providers()
    ]
