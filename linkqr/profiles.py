"""Profile QR maintenance: a small record store plus regeneration helpers."""

import json
import threading
from dataclasses import dataclass, field
from pathlib import Path

from linkqr.encode import validate_data_uri
from linkqr.errors import QRRenderError
from linkqr.logging import audit, get_logger, trace
from linkqr.pipeline import generate_profile_qr

log = get_logger("profiles")


class ProfileNotFound(KeyError):
    """No profile record exists for the username."""


class ProfileStore:
    """JSON-file-backed key-value store of profile records, keyed by username.

    Thread-safe. For production, put the same ``find`` / ``save`` interface
    in front of a real database.
    """

    def __init__(self, db_path: str = "profiles.json"):
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._data = {"profiles": {}}
        if self.db_path.exists():
            with open(self.db_path) as f:
                self._data = json.load(f)
            log.info("Loaded store from %s (%d profiles)", self.db_path, len(self._data["profiles"]))

    def _save(self, data: dict | None = None):
        tmp = self.db_path.with_name(self.db_path.name + ".tmp")
        with open(tmp, "w") as f:
            json.dump(self._data if data is None else data, f, indent=2)
        tmp.replace(self.db_path)

    def find(self, username: str) -> dict | None:
        record = self._data["profiles"].get(username)
        return dict(record) if record is not None else None

    def save(self, record: dict) -> dict:
        """Insert or replace the record stored under ``record["username"]``."""
        username = record.get("username")
        if not username:
            raise ValueError("Profile record needs a non-empty 'username'")
        with self._lock:
            self._data["profiles"][username] = dict(record)
            self._save()
        return record

    def delete(self, username: str) -> bool:
        with self._lock:
            removed = self._data["profiles"].pop(username, None) is not None
            if removed:
                self._save()
        return removed

    def rename(self, old: str, new: str) -> dict:
        """Move the record under *old* to *new* in a single locked write.

        The moved record's ``qr_code`` is cleared. In-memory state only
        changes once the write has succeeded.

        Raises:
            ProfileNotFound: no record for *old*.
            ValueError: *new* is empty or already taken.
        """
        if not new:
            raise ValueError("New username must be non-empty")
        with self._lock:
            profiles = self._data["profiles"]
            if old not in profiles:
                raise ProfileNotFound(old)
            if old != new and new in profiles:
                raise ValueError(f"Username {new!r} is already taken")

            record = dict(profiles[old], username=new, qr_code=None)
            updated = {k: v for k, v in profiles.items() if k != old}
            updated[new] = record
            data = {**self._data, "profiles": updated}
            self._save(data)
            self._data = data
        return dict(record)

    def all(self) -> list[dict]:
        return [dict(r) for r in self._data["profiles"].values()]


@trace
def refresh_profile_qr(store: ProfileStore, username: str, base_url: str, **render_kwargs) -> str | None:
    """Regenerate and persist a user's profile QR.

    A render failure is logged and stored as ``None`` so the profile page
    simply omits the QR code.

    Raises:
        ProfileNotFound: no record for *username*.
    """
    record = store.find(username)
    if record is None:
        raise ProfileNotFound(username)

    try:
        qr_code = generate_profile_qr(username, base_url, **render_kwargs)
    except QRRenderError as exc:
        log.warning("QR generation failed for %s: %s", username, exc)
        audit("profile.qr_failed", logger=log, username=username, error=str(exc))
        qr_code = None

    record["qr_code"] = qr_code
    store.save(record)
    return qr_code


@trace
def rename_profile(store: ProfileStore, old: str, new: str, base_url: str, **render_kwargs) -> str | None:
    """Move a profile to a new username and regenerate its QR.

    The old QR encodes the old profile URL, so it is never carried over.
    """
    store.rename(old, new)
    audit("profile.renamed", logger=log, old=old, new=new)
    return refresh_profile_qr(store, new, base_url, **render_kwargs)


@dataclass
class RegenerationSummary:
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


@trace
def regenerate_all(store: ProfileStore, base_url: str, **render_kwargs) -> RegenerationSummary:
    """Re-render every stored profile QR (e.g. after a logo or colour change).

    One user's failure never stops the batch.
    """
    summary = RegenerationSummary()
    for record in store.all():
        username = record["username"]
        qr_code = refresh_profile_qr(store, username, base_url, **render_kwargs)
        try:
            validate_data_uri(qr_code)
        except QRRenderError:
            summary.failed.append(username)
            continue
        summary.succeeded.append(username)

    audit("profile.regenerated", logger=log,
          succeeded=len(summary.succeeded), failed=len(summary.failed), total=summary.total)
    return summary
