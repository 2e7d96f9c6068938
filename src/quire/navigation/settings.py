"""
Provider configuration and environment.

``Settings`` is the user-facing configuration map exposed through
``get_settings``/``update_settings``. ``ProviderContext`` carries the hints
an embedding page knows about its environment (home domain, single instance,
where the document came from, which transports work), passed in explicitly
so providers never read global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable
import json
import time

from pydantic import BaseModel, ConfigDict, Field

from quire.document.loaders import Fetcher, fetch_json, fetch_jsonp


class Settings(BaseModel):
    """
    Viewer options.

    Keys are accepted in the camelCase used by viewer config files
    (``pagingEnabled``) or as snake_case attribute names. Unknown keys are
    kept, so extensions can carry their own options.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    paging_enabled: bool = Field(default=True, alias="pagingEnabled")
    see_also_enabled: bool = Field(default=True, alias="seeAlsoEnabled")
    section_mappings: dict[str, str] = Field(default_factory=dict, alias="sectionMappings")
    data_base_uri: str | None = Field(default=None, alias="dataBaseUri")
    media_base_uri: str | None = Field(default=None, alias="mediaBaseUri")
    media_uri_template: str = Field(default="{0}{1}", alias="mediaUriTemplate")
    dzi_base_uri: str | None = Field(default=None, alias="dziBaseUri")
    dzi_uri_template: str = Field(default="{0}{1}", alias="dziUriTemplate")
    thumbs_uri_template: str = Field(default="{0}{1}", alias="thumbsUriTemplate")
    timestamp_uris: bool = Field(default=False, alias="timestampUris")

    @classmethod
    def from_file(cls, path: Path) -> Settings:
        """
        Load settings from a JSON config file.

        Both a bare options object and a viewer config with an ``options``
        key are accepted.
        """
        data = json.loads(path.expanduser().read_text(encoding="utf-8"))
        if isinstance(data.get("options"), dict):
            data = data["options"]
        return cls.model_validate(data)


def _millis() -> int:
    return int(time.time() * 1000)


@dataclass
class ProviderContext:
    """
    Environment of one viewer instance.

    Attributes:
        data_uri: URI the document was loaded from (used by reload)
        sequence_index: Sequence to show
        is_home_domain: Viewer runs on its own site (not embedded elsewhere)
        is_only_instance: Viewer is the only one on the page
        is_reload: Page was opened by a reload
        is_lightbox: Viewer runs inside a lightbox
        embed_domain: Domain of the embedding page
        domain: Domain the viewer is served from
        jsonp: JSONP transport explicitly requested
        cors: Cross-origin fetch is available
        fetch: Transport for cross-origin fetch
        fetch_jsonp: Callback-polling transport
        clock: Millisecond timestamp source for cache busting
    """

    data_uri: str | None = None
    sequence_index: int = 0
    is_home_domain: bool = False
    is_only_instance: bool = False
    is_reload: bool = False
    is_lightbox: bool = False
    embed_domain: str | None = None
    domain: str | None = None
    jsonp: bool = False
    cors: bool = True
    fetch: Fetcher = fetch_json
    fetch_jsonp: Callable[..., dict[str, Any]] = fetch_jsonp
    clock: Callable[[], int] = field(default=_millis, repr=False)
