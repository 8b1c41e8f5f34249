"""
Blogdesk Backend: Cloudinary Image Host
=========================================

What:  Uploads and deletes blog images through Cloudinary's REST API.
How:   Signed multipart POSTs over one shared httpx.AsyncClient:
           POST {base}/v1_1/{cloud}/image/upload   → {secure_url, public_id}
           POST {base}/v1_1/{cloud}/image/destroy  → {result: "ok"}
       Signature = sha1("k1=v1&k2=v2..." + api_secret) over the signed params
       (everything except file, api_key and the signature itself), keys sorted.
Who:   Selected with IMAGE_HOST=cloudinary (default).

Failures (transport errors, non-2xx, unexpected bodies) raise ImageHostError
with the upstream status/body in `context`. No retries.
"""

import hashlib
import logging
import time
from typing import Dict, Optional

import httpx

from blogdesk.exceptions import ImageHostError
from blogdesk.services.image_host_base import ImageHost, UploadedImage

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com"


def sign_params(params: Dict[str, str], api_secret: str) -> str:
    """Cloudinary request signature for `params`."""
    to_sign = "&".join(f"{k}={v}" for k, v in sorted(params.items()) if v not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryImageHost(ImageHost):
    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str,
        max_file_size: int,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        api_base: str = CLOUDINARY_API_BASE,
    ):
        super().__init__(folder=folder, max_file_size=max_file_size)
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = f"{api_base.rstrip('/')}/v1_1/{cloud_name}/image"
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _signed(self, params: Dict[str, str]) -> Dict[str, str]:
        params = dict(params, timestamp=str(int(time.time())))
        signature = sign_params(params, self.api_secret)
        return dict(params, api_key=self.api_key, signature=signature)

    async def _post(self, action: str, data: Dict[str, str], files=None) -> dict:
        url = f"{self.base_url}/{action}"
        try:
            response = await self._client.post(url, data=data, files=files)
        except httpx.HTTPError as e:
            logger.error("Cloudinary %s request failed: %s", action, str(e))
            raise ImageHostError(
                message=f"Image host {action} failed",
                context={"action": action, "error": str(e)},
            )

        if response.status_code >= 400:
            logger.error(
                "Cloudinary %s returned %d: %s",
                action,
                response.status_code,
                response.text[:500],
            )
            raise ImageHostError(
                message=f"Image host {action} failed",
                context={"action": action, "status": response.status_code, "body": response.text[:500]},
            )

        try:
            return response.json()
        except ValueError:
            raise ImageHostError(
                message=f"Image host {action} returned an invalid response",
                context={"action": action, "body": response.text[:500]},
            )

    async def upload(self, content: bytes, filename: Optional[str]) -> UploadedImage:
        self.validate_upload(filename, content)
        data = self._signed({"folder": self.folder})
        body = await self._post("upload", data, files={"file": (filename, content)})

        url = body.get("secure_url")
        public_id = body.get("public_id")
        if not url or not public_id:
            raise ImageHostError(
                message="Image host upload returned an incomplete response",
                context={"body": body},
            )
        logger.info("Image uploaded: %s (%d bytes)", public_id, len(content))
        return UploadedImage(url=url, public_id=public_id)

    async def delete(self, public_id: str) -> None:
        data = self._signed({"public_id": public_id})
        body = await self._post("destroy", data)

        result = body.get("result")
        # "not found" means the image is already gone
        if result not in ("ok", "not found"):
            raise ImageHostError(
                message="Image host destroy failed",
                context={"public_id": public_id, "result": result},
            )
        logger.info("Image deleted: %s (%s)", public_id, result)

    async def close(self) -> None:
        await self._client.aclose()
