"""Configuration helpers for constructing parsers and clients."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .client import WCSClient
from .parser import WCSParser, create_registry


class ClientConfig(BaseModel):
    """Serializable configuration describing how to talk to a WCS endpoint."""

    base_url: str = Field(..., description="Base endpoint URL for the service")
    eowcs: bool = Field(default=True, description="Load the EO-WCS parsers")
    throw_on_exception: bool = Field(
        default=False, description="Raise ServiceException for parsed exception reports"
    )
    extra_params: Dict[str, Any] = Field(
        default_factory=dict, description="Vendor specific query parameters added to every request"
    )
    headers: Dict[str, str] = Field(
        default_factory=dict, description="Additional HTTP headers to include"
    )
    timeout: Optional[float] = Field(default=30, description="Request timeout in seconds")

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "ClientConfig":
        """Convenience constructor mirroring high-level usage patterns."""

        return cls(base_url=url, **kwargs)

    def build_parser(self) -> WCSParser:
        """Create a parser with its own registry for this configuration."""

        return WCSParser(
            create_registry(eowcs_profile=self.eowcs),
            throw_on_exception=self.throw_on_exception,
        )

    def build_client(self, **kwargs: Any) -> WCSClient:
        """Construct a ``WCSClient``; ``kwargs`` (e.g. ``session``) are passed through."""

        kwargs.setdefault("parser", self.build_parser())
        return WCSClient(
            self.base_url,
            extra_params=dict(self.extra_params),
            headers=dict(self.headers),
            timeout=self.timeout,
            **kwargs,
        )
