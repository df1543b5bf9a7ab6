"""Manually curated list of target construction sites."""

from __future__ import annotations

from permithub.common.constants import STORE_KEY_TARGETS
from permithub.common.errors import StorageError, ValidationError
from permithub.common.ids import generate_target_id
from permithub.common.models import Record, TargetSite
from permithub.common.time_utils import format_yyyymmdd
from permithub.storage.local_store import LocalStore

REQUIRED_TARGET_FIELDS = ("address", "contractor", "completion_date", "contact", "email")


def validate_target(fields: dict[str, str]) -> None:
    missing = [name for name in REQUIRED_TARGET_FIELDS if not str(fields.get(name) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required target fields: {', '.join(missing)}")
    if "@" not in fields["email"]:
        raise ValidationError(f"Invalid email address: {fields['email']!r}")


class TargetList:
    def __init__(self, store: LocalStore) -> None:
        self.store = store

    def all(self) -> list[TargetSite]:
        raw = self.store.get(STORE_KEY_TARGETS, [])
        if not isinstance(raw, list):
            raise StorageError(f"{STORE_KEY_TARGETS} must be a list")
        return [TargetSite.from_dict(item) for item in raw]

    def _save(self, targets: list[TargetSite]) -> None:
        self.store.set(STORE_KEY_TARGETS, [target.to_dict() for target in targets])

    def add(
        self,
        *,
        address: str,
        contractor: str,
        completion_date: str,
        contact: str,
        email: str,
        note: str = "",
    ) -> TargetSite:
        fields = {
            "address": address,
            "contractor": contractor,
            "completion_date": completion_date,
            "contact": contact,
            "email": email,
        }
        validate_target(fields)
        site = TargetSite(
            id=generate_target_id(),
            note=(note or "").strip(),
            **{key: value.strip() for key, value in fields.items()},
        )
        targets = self.all()
        targets.append(site)
        self._save(targets)
        return site

    def add_from_record(self, record: Record, *, contact: str, email: str, note: str = "") -> TargetSite:
        """Promote an aggregated record to the target list; contact details come from the user."""
        address = record.get("newPlatPlc") or record.get("platPlc") or ""
        return self.add(
            address=str(address),
            contractor=str(record.get("constructionCompany") or ""),
            completion_date=str(format_yyyymmdd(record.get("useAprDay") or "")),
            contact=contact,
            email=email,
            note=note,
        )

    def remove(self, target_id: str) -> bool:
        targets = self.all()
        kept = [target for target in targets if target.id != target_id]
        if len(kept) == len(targets):
            return False
        self._save(kept)
        return True

    def clear(self) -> None:
        self.store.remove(STORE_KEY_TARGETS)
