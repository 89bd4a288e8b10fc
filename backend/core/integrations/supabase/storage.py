import os
import uuid
import httpx

from core.integrations.supabase.settings import settings


class SupabaseStorage:
    def __init__(self, bucket_key: str = "media"):
        self.url = settings.url
        self.key = settings.service_key

        bucket_conf = settings.buckets.get(bucket_key)
        if bucket_conf is None:
            raise ValueError(
                f"Bucket configuration '{bucket_key}' not found in settings.buckets"
            )

        self.bucket = bucket_conf.name
        self.path = bucket_conf.path
        self.expires = bucket_conf.expires

    def valid(self) -> bool:
        return bool(self.url and self.key and self.bucket)

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        h = {"Authorization": f"Bearer {self.key}", "apikey": self.key}
        if content_type:
            h["Content-Type"] = content_type
        return h

    def object_path(self, folder: str, filename: str) -> str:
        _, ext = os.path.splitext(filename or "")
        return self.path.format(
            folder=folder, uuid=uuid.uuid4().hex, ext=(ext or ".jpg").lower()
        )

    async def upload_bytes(
        self,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        url = f"{self.url}/storage/v1/object/{self.bucket}/{path}"
        async with httpx.AsyncClient(timeout=30.0) as client:
            resp = await client.post(
                url,
                headers={**self._headers(content_type), "x-upsert": "false"},
                content=data,
            )
        if resp.status_code not in (200, 201):
            raise RuntimeError(f"上传失败 {resp.status_code}: {resp.text}")
        if self.expires and self.expires > 0:
            return await self.sign_url(path, self.expires)
        return self.public_url(path)

    async def sign_url(self, path: str, expires: int | None = None) -> str:
        url = f"{self.url}/storage/v1/object/sign/{self.bucket}/{path}"
        async with httpx.AsyncClient(timeout=30.0) as client:
            resp = await client.post(
                url,
                headers=self._headers("application/json"),
                json={"expiresIn": expires or self.expires},
            )
        if resp.status_code != 200:
            raise RuntimeError(f"签名失败 {resp.status_code}: {resp.text}")
        data = resp.json()
        signed = data.get("signedURL") or data.get("signedUrl") or ""
        if signed.startswith("/"):
            return f"{self.url}/storage/v1{signed}"
        return signed

    def public_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{path}"


supabase_storage_media = SupabaseStorage("media")
