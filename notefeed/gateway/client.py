"""
Low-level client for the hosted notes backend.

Talks to two endpoint families of a Supabase-style project:
  - /rest/v1/notes            row-level CRUD with range pagination
  - /storage/v1/object/...    blob upload and bulk remove

It returns typed Pydantic models from notefeed.gateway.models and hides
HTTP details from the notes layer.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Dict, Iterable, List, Mapping, Optional
from urllib.parse import quote, urlencode

import requests
from pydantic import ValidationError

from .models import (
    NoteInsert,
    NoteRow,
    NoteUpdate,
    StorageRemoveRequest,
    StorageUploadResponse,
)

LOGGER = logging.getLogger(__name__)

NOTES_TABLE = "notes"


# ------------------------------- Errors --------------------------------------


class NotesError(Exception):
    """Base notes transport error."""


class NotesAuthError(NotesError):
    """Missing or expired credentials (401/403)."""


class NotesRateLimited(NotesError):
    """429 Too Many Requests."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NotesApiError(NotesError):
    """Catch-all API error."""

    def __init__(self, message: str, payload: Optional[object] = None):
        super().__init__(message)
        self.payload = payload


class NoteNotFound(NotesApiError):
    """The targeted row does not exist (or is not visible to this user)."""


# ------------------------------- Transport -----------------------------------


class _RestTransport:
    """
    Minimal HTTP transport:
      - apikey + bearer headers on every request
      - JSON bodies via `json=payload`, raw bodies via `data=`
      - Bounded debug dumps (NOTEFEED_DEBUG_MAX_BYTES)
    """

    def __init__(
        self,
        base_url: str,
        session: requests.Session,
        api_key: str,
        access_token: Optional[str] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
        }
        LOGGER.debug("Initialized _RestTransport with base_url: %s", self._base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _build_url(self, path: str, params: Optional[Mapping[str, object]]) -> str:
        q = urlencode(params or {}, safe="*,.()", quote_via=quote)
        return f"{self._base_url}{path}" + (f"?{q}" if q else "")

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, object]] = None,
        payload: Optional[object] = None,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        expect_json: bool = True,
    ):
        url = self._build_url(path, params)
        merged = {**self._headers, **(headers or {})}
        LOGGER.info("%s %s", method, url)
        kwargs: Dict[str, object] = {"headers": merged}
        if payload is not None:
            kwargs["json"] = payload
        if data is not None:
            kwargs["data"] = data
        resp = self._session.request(method, url, **kwargs)
        code = getattr(resp, "status_code", 0)
        LOGGER.debug("%s %s returned status %d", method, url, code)
        if code >= 400:
            self._dump_http_debug(method.lower(), url, payload, resp)
            if code in (401, 403):
                LOGGER.error("%s %s failed with auth error: %d", method, url, code)
                raise NotesAuthError(f"HTTP {code}: unauthorized")
            if code == 429:
                retry_after = None
                try:
                    hdr = resp.headers.get("Retry-After")
                    if hdr:
                        retry_after = float(hdr)
                except (TypeError, ValueError):
                    retry_after = None
                LOGGER.warning(
                    "%s %s was rate-limited. Retry after: %s", method, url, retry_after
                )
                raise NotesRateLimited("HTTP 429: rate limited", retry_after=retry_after)
            try:
                body = resp.json()
            except ValueError:
                body = getattr(resp, "text", None)
            LOGGER.error("%s %s failed with code %d", method, url, code)
            raise NotesApiError(f"HTTP {code}", payload=body)
        if not expect_json:
            return None
        try:
            return resp.json()
        except ValueError:
            self._dump_http_debug(method.lower(), url, payload, resp)
            LOGGER.error("Failed to parse JSON response from %s", url)
            raise NotesApiError(
                "Invalid JSON response", payload=getattr(resp, "text", None)
            )

    @staticmethod
    def _dump_http_debug(op: str, url: str, payload: object, resp) -> None:
        if not os.getenv("NOTEFEED_DEBUG"):
            return
        ts = time.strftime("%Y%m%d-%H%M%S")
        out_dir = os.path.join("workspace", "notefeed_debug")
        try:
            os.makedirs(out_dir, exist_ok=True)
            with open(
                os.path.join(out_dir, f"{ts}_{op}_http_request.json"),
                "w",
                encoding="utf-8",
            ) as f:
                json.dump({"url": url, "payload": payload}, f, ensure_ascii=False, indent=2)
            body_text = getattr(resp, "text", None) or ""
            max_bytes = int(os.getenv("NOTEFEED_DEBUG_MAX_BYTES", "524288"))
            if len(body_text) > max_bytes:
                body_text = body_text[:max_bytes] + "\n[truncated]\n"
            with open(
                os.path.join(out_dir, f"{ts}_{op}_http_response.txt"),
                "w",
                encoding="utf-8",
            ) as f:
                f.write(
                    f"status={getattr(resp, 'status_code', None)}\nurl={url}\n"
                    f"headers={dict(getattr(resp, 'headers', {}) or {})}\n\n"
                )
                f.write(body_text)
        except (OSError, TypeError) as exc:
            LOGGER.debug("Could not write HTTP debug dump: %s", exc)


# ------------------------------ Raw client -----------------------------------


class NotesGatewayClient:
    """
    Typed access to the notes collection and the blob bucket.

    Methods map 1:1 to backend calls:
      - select_range -> GET    /rest/v1/notes
      - get          -> GET    /rest/v1/notes?id=eq.<id>
      - insert       -> POST   /rest/v1/notes
      - update       -> PATCH  /rest/v1/notes
      - delete       -> DELETE /rest/v1/notes
      - upload       -> POST   /storage/v1/object/<bucket>/<path>
      - remove       -> DELETE /storage/v1/object/<bucket>
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self._http = _RestTransport(
            base_url, session or requests.Session(), api_key, access_token
        )
        LOGGER.info("NotesGatewayClient initialized.")

    @classmethod
    def from_settings(cls, settings, session=None) -> "NotesGatewayClient":
        return cls(
            settings.url,
            settings.anon_key,
            access_token=settings.access_token,
            session=session,
        )

    # ----- Rows -----

    def select_range(
        self, offset: int, limit: int, *, search: Optional[str] = None
    ) -> List[NoteRow]:
        """Rows ordered newest first, restricted to ``[offset, offset+limit-1]``."""
        params: Dict[str, object] = {
            "select": "*",
            "order": "created_at.desc",
            "offset": offset,
            "limit": limit,
        }
        if search and search.strip():
            params["content"] = f"ilike.*{search.strip()}*"
        LOGGER.info(
            "Selecting notes offset=%d limit=%d search=%r", offset, limit, search
        )
        data = self._http.request("GET", f"/rest/v1/{NOTES_TABLE}", params=params)
        rows = self._validate_rows("notes.select", data)
        LOGGER.info("Select returned %d rows.", len(rows))
        return rows

    def get(self, note_id: str) -> NoteRow:
        data = self._http.request(
            "GET",
            f"/rest/v1/{NOTES_TABLE}",
            params={"select": "*", "id": f"eq.{note_id}"},
        )
        return self._single("notes.get", data, note_id=note_id)

    def insert(self, content: str) -> NoteRow:
        payload = NoteInsert(content=content).model_dump()
        data = self._http.request(
            "POST",
            f"/rest/v1/{NOTES_TABLE}",
            params={"select": "*"},
            payload=payload,
            headers={"Prefer": "return=representation"},
        )
        return self._single("notes.insert", data)

    def update(self, note_id: str, content: str) -> NoteRow:
        payload = NoteUpdate(content=content).model_dump()
        data = self._http.request(
            "PATCH",
            f"/rest/v1/{NOTES_TABLE}",
            params={"id": f"eq.{note_id}", "select": "*"},
            payload=payload,
            headers={"Prefer": "return=representation"},
        )
        return self._single("notes.update", data, note_id=note_id)

    def delete(self, note_id: str) -> None:
        LOGGER.info("Deleting note %s", note_id)
        self._http.request(
            "DELETE",
            f"/rest/v1/{NOTES_TABLE}",
            params={"id": f"eq.{note_id}"},
            headers={"Prefer": "return=minimal"},
            expect_json=False,
        )

    # ----- Storage -----

    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str = "application/octet-stream",
        upsert: bool = True,
    ) -> str:
        """Upload ``data`` under ``path`` and return the object path inside ``bucket``."""
        LOGGER.info("Uploading %d bytes to %s/%s", len(data), bucket, path)
        resp = self._http.request(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path)}",
            data=data,
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if upsert else "false",
            },
        )
        try:
            key = StorageUploadResponse.model_validate(resp).key
        except ValidationError as e:
            LOGGER.error("Upload response validation failed: %s", e)
            raise NotesApiError("Upload response validation failed", payload=resp)
        prefix = f"{bucket}/"
        return key[len(prefix):] if key.startswith(prefix) else key

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        """Bulk remove objects; an empty list issues no request."""
        path_list = sorted(set(p for p in paths if p))
        if not path_list:
            LOGGER.debug("Nothing to remove from bucket %s", bucket)
            return
        LOGGER.info("Removing %d objects from bucket %s", len(path_list), bucket)
        self._http.request(
            "DELETE",
            f"/storage/v1/object/{bucket}",
            payload=StorageRemoveRequest(prefixes=path_list).model_dump(),
        )

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._http.base_url}/storage/v1/object/public/{bucket}/{path}"

    # ----- Validation -----

    @staticmethod
    def _validate_rows(op: str, data: object) -> List[NoteRow]:
        if not isinstance(data, list):
            LOGGER.error("%s: expected a list of rows", op)
            raise NotesApiError(f"{op}: expected a list of rows", payload=data)
        try:
            return [NoteRow.model_validate(item) for item in data]
        except ValidationError as e:
            LOGGER.error("%s response validation failed: %s", op, e)
            raise NotesApiError(f"{op} response validation failed", payload=data)

    def _single(self, op: str, data: object, note_id: Optional[str] = None) -> NoteRow:
        rows = self._validate_rows(op, data)
        if not rows:
            raise NoteNotFound(f"Note not found: {note_id}", payload=data)
        return rows[0]
