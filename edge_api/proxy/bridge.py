"""Client for the external camera bridge service."""

import json
from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any
from urllib.parse import quote, urljoin

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.responses import Response

from edge_api.errors import ClientInputError, NotConfiguredError, UpstreamUnavailableError
from edge_api.fetch.constants import BRIDGE_CONTROL_TIMEOUT_SECONDS
from edge_api.proxy.headers import CORS_HEADERS
from edge_api.proxy.stream import RangeProxy


logger = structlog.get_logger()

# Characters encodeURIComponent leaves alone besides the RFC 3986 unreserved set
_PATH_SEGMENT_SAFE = "!*'()"


class CameraAction(str, Enum):
    """Pan/tilt actions the bridge understands."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    STOP = "stop"


ALLOWED_ACTIONS: tuple[str, ...] = tuple(action.value for action in CameraAction)


class ControlCommand(BaseModel):
    """Validated body of a camera control request."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    camera_id: Annotated[str, Field(min_length=1, alias="cameraId")]
    action: CameraAction
    duration_ms: int | None = Field(default=None, ge=0, alias="durationMs")

    def upstream_body(self) -> dict[str, Any]:
        """Body forwarded to the bridge; durationMs is omitted when unset."""
        body: dict[str, Any] = {"action": self.action.value}
        if self.duration_ms is not None:
            body["durationMs"] = self.duration_ms
        return body


def parse_control_body(raw: bytes, id_alias: bool = False) -> ControlCommand:
    """Parse and validate a camera control request body.

    Args:
        raw: Raw request body.
        id_alias: Accept `id` as an alias for `cameraId`.

    Returns:
        Validated control command.

    Raises:
        ClientInputError: Invalid JSON, or missing/invalid fields.
    """
    try:
        document = json.loads(raw)
    except ValueError as e:
        raise ClientInputError("Invalid JSON body", cors=True) from e

    if not isinstance(document, dict):
        document = {}
    if id_alias and not document.get("cameraId") and document.get("id"):
        document = {**document, "cameraId": document["id"]}

    try:
        return ControlCommand.model_validate(document)
    except ValidationError as e:
        raise ClientInputError(
            "Missing/invalid cameraId or action",
            details={"allowedActions": list(ALLOWED_ACTIONS)},
            cors=True,
        ) from e


class BridgeClient:
    """Streams and controls cameras through the configured bridge.

    The bridge base URL is required for every operation; the bearer
    token is optional and injected into every bridge request when set.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        proxy: RangeProxy,
        base_url: str | None,
        token: str | None = None,
    ) -> None:
        """Initialize the bridge client.

        Args:
            client: Shared async HTTP client.
            proxy: Range proxy used for stream relaying.
            base_url: Bridge base URL, None when not configured.
            token: Optional bearer token for the bridge.
        """
        self._client = client
        self._proxy = proxy
        self._base_url = base_url
        self._token = token
        self._log = logger.bind(component="bridge")

    @property
    def configured(self) -> bool:
        return bool(self._base_url)

    def camera_url(self, camera_id: str, operation: str) -> str:
        """Build the bridge URL for a camera operation.

        Args:
            camera_id: Camera identifier, percent-encoded as one segment.
            operation: Trailing path segment (stream or ptz).

        Returns:
            Absolute bridge URL.

        Raises:
            NotConfiguredError: If no bridge base URL is configured.
        """
        if not self._base_url:
            raise NotConfiguredError(["BRIDGE_BASE"])
        segment = quote(camera_id, safe=_PATH_SEGMENT_SAFE)
        return urljoin(self._base_url, f"/camera/{segment}/{operation}")

    def _auth_headers(self) -> dict[str, str]:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    async def stream(
        self,
        method: str,
        camera_id: str,
        incoming_headers: Mapping[str, str],
    ) -> Response:
        """Relay a camera stream with range semantics intact.

        Args:
            method: Inbound method, GET or HEAD.
            camera_id: Camera identifier.
            incoming_headers: Inbound request headers.

        Returns:
            Relayed streaming response.
        """
        url = self.camera_url(camera_id, "stream")
        return await self._proxy.forward(
            method,
            url,
            incoming_headers,
            extra_headers=self._auth_headers(),
        )

    async def control(self, command: ControlCommand) -> Response:
        """Forward a pan/tilt command and relay the bridge's answer.

        Args:
            command: Validated control command.

        Returns:
            Response mirroring the bridge's status, body and content type.

        Raises:
            UpstreamUnavailableError: If the bridge cannot be reached.
        """
        url = self.camera_url(command.camera_id, "ptz")
        headers = {"Content-Type": "application/json", **self._auth_headers()}
        log = self._log.bind(camera_id=command.camera_id, action=command.action.value)

        try:
            upstream = await self._client.post(
                url,
                headers=headers,
                content=json.dumps(command.upstream_body()),
                timeout=BRIDGE_CONTROL_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            log.warning("bridge_control_unavailable", error=str(e))
            raise UpstreamUnavailableError(
                "Bridge unavailable", details={"detail": str(e)}, cors=True
            ) from e

        log.info("bridge_control", status_code=upstream.status_code)
        out_headers = dict(CORS_HEADERS)
        content_type = upstream.headers.get("content-type")
        if content_type:
            out_headers["Content-Type"] = content_type
        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            headers=out_headers,
        )
