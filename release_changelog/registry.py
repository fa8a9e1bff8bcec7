"""npm-style registry lookup for the latest published version."""

from __future__ import annotations

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field

from release_changelog.core.config import DEFAULT_HTTP_TIMEOUT, Settings
from release_changelog.core.errors import RegistryError

log = structlog.get_logger("release_changelog.registry")


class DistTags(BaseModel):
    latest: str | None = None


class RegistryDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dist_tags: DistTags | None = Field(default=None, alias="dist-tags")

    @property
    def latest(self) -> str:
        return (self.dist_tags.latest if self.dist_tags else None) or ""


def tag_for_version(version: str) -> str:
    """Release tag for *version*: a literal ``v`` prefix, nothing else."""
    return "v" + version


class RegistryClient:
    """Reads package documents from an npm-compatible registry."""

    def __init__(
        self,
        *,
        verify: bool = True,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, verify=verify, transport=transport)

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> RegistryClient:
        return cls(verify=settings.verify_tls, timeout=settings.http_timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def resolve_latest_version(self, registry_url: str, package_name: str) -> str:
        """GET ``<registry>/<package>`` and return ``dist-tags.latest`` verbatim.

        A document without the tag yields ``""``; the caller decides what
        that means. Transport, status and decode failures raise
        :class:`RegistryError`.
        """
        url = f"{registry_url.rstrip('/')}/{package_name}"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            document = RegistryDocument.model_validate_json(response.content)
        except httpx.HTTPStatusError as exc:
            raise RegistryError(
                f"registry lookup {url} failed: HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise RegistryError(f"registry lookup {url} failed: {exc}") from exc

        version = document.latest
        if version:
            log.info("registry.resolved", package=package_name, version=version)
        else:
            log.warning("registry.no_latest_tag", package=package_name, url=url)
        return version
