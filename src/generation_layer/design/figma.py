"""
Figma design source.

Turns a Figma file into DesignNode records:
1. GET /files/{key}: walk the document tree, collect FRAME and COMPONENT nodes
2. GET /images/{key}?ids=...&format=png&scale=2: render them to PNG URLs
3. Download each PNG and attach it to its node

Nodes whose render fails are kept without an image.
"""

import re
from typing import Any, Optional

import httpx
import structlog

from generation_layer.design.exceptions import DesignSourceError, InvalidFigmaUrl
from generation_layer.models.generation import BoundingBox, DesignNode, ImageAttachment

logger = structlog.get_logger(__name__)

FILE_KEY_PATTERN = re.compile(r"figma\.com/(?:file|design|proto)/([A-Za-z0-9]+)")
BARE_KEY_PATTERN = re.compile(r"^[A-Za-z0-9]{10,}$")
COLLECTED_NODE_TYPES = frozenset({"FRAME", "COMPONENT"})


def extract_file_key(url_or_key: str) -> str:
    """
    Extract the file key from a Figma URL (file/, design/ or proto/ links).

    A bare key is returned unchanged.

    Raises:
        InvalidFigmaUrl: Neither a Figma URL nor a plausible key
    """
    value = url_or_key.strip()
    match = FILE_KEY_PATTERN.search(value)
    if match:
        return match.group(1)
    if BARE_KEY_PATTERN.match(value):
        return value
    raise InvalidFigmaUrl(url_or_key)


def collect_nodes(document: dict[str, Any], max_frames: int) -> list[dict[str, Any]]:
    """Depth-first FRAME/COMPONENT nodes, in document order, up to max_frames."""
    collected: list[dict[str, Any]] = []
    stack = [document]
    while stack and len(collected) < max_frames:
        node = stack.pop()
        if node.get("type") in COLLECTED_NODE_TYPES:
            collected.append(node)
        stack.extend(reversed(node.get("children") or []))
    return collected


class FigmaDesignSource:
    """
    Client for the Figma REST API.

    Attributes:
        base_url: API root (https://api.figma.com/v1)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.figma.com/v1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def _get(self, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.get(url, **kwargs)
        except httpx.HTTPError as e:
            raise DesignSourceError(f"Figma request failed: {e}", details={"url": url}) from e
        if response.status_code != 200:
            raise DesignSourceError(
                f"Figma request failed with status {response.status_code}",
                details={"url": url, "status": response.status_code, "error": response.text[:500]},
            )
        return response

    async def fetch_nodes(self, url_or_key: str, max_frames: int = 10) -> list[DesignNode]:
        """
        Fetch frames of a Figma file, rendered to PNG.

        Args:
            url_or_key: Figma file URL or bare file key
            max_frames: Maximum number of frames to import

        Returns:
            DesignNode list in document order

        Raises:
            InvalidFigmaUrl: URL has no file key
            DesignSourceError: API failure or a file without frames
        """
        file_key = extract_file_key(url_or_key)
        headers = {"X-Figma-Token": self._access_token, "Accept": "application/json"}

        file_response = await self._get(f"/files/{file_key}", headers=headers)
        document = file_response.json().get("document") or {}
        raw_nodes = collect_nodes(document, max_frames)
        if not raw_nodes:
            raise DesignSourceError(
                "Figma file has no frames or components", details={"file_key": file_key}
            )

        ids = ",".join(node["id"] for node in raw_nodes)
        images_response = await self._get(
            f"/images/{file_key}",
            headers=headers,
            params={"ids": ids, "format": "png", "scale": 2},
        )
        image_urls: dict[str, Optional[str]] = images_response.json().get("images") or {}

        nodes = []
        for raw in raw_nodes:
            image = await self._download(raw["id"], image_urls.get(raw["id"]))
            box = raw.get("absoluteBoundingBox")
            nodes.append(
                DesignNode(
                    id=raw["id"],
                    name=raw.get("name", raw["id"]),
                    type=raw.get("type", "FRAME"),
                    bounding_box=BoundingBox(**box) if box else None,
                    image=image,
                )
            )

        logger.info(
            "Fetched Figma nodes",
            file_key=file_key,
            nodes=len(nodes),
            rendered=sum(1 for node in nodes if node.image is not None),
        )
        return nodes

    async def _download(self, node_id: str, url: Optional[str]) -> Optional[ImageAttachment]:
        if not url:
            logger.warning("Figma did not render node", node_id=node_id)
            return None
        try:
            response = await self._get(url)
        except DesignSourceError as e:
            logger.warning("Failed to download Figma render", node_id=node_id, error=e.message)
            return None
        if not response.content:
            return None
        return ImageAttachment(data=response.content, mime_type="image/png", name=f"{node_id}.png")

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
