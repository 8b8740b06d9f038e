"""Service layer for the opaque company settings store."""

from collections.abc import Mapping

from sqlalchemy import select

from money_kernel.exceptions import InvalidRecordError
from money_kernel.models.company_setting import CompanySetting
from money_kernel.services.base import BaseService


class CompanySettingsService(BaseService):
    """
    Key/value upserts.

    Values are stored as given (``None`` becomes ""); the kernel never
    interprets them.
    """

    def update_settings(self, settings: Mapping[str, str | None]) -> dict[str, str]:
        for key in settings:
            if not isinstance(key, str) or not key.strip():
                raise InvalidRecordError("company_setting", "key", "must not be empty")

        existing = {
            row.key: row
            for row in self.session.scalars(
                select(CompanySetting).where(CompanySetting.key.in_(list(settings)))
            ).all()
        }
        for key, value in settings.items():
            row = existing.get(key)
            if row is None:
                row = CompanySetting(key=key)
                self.session.add(row)
            row.value = "" if value is None else str(value)
        self.session.flush()
        return {key: ("" if value is None else str(value)) for key, value in settings.items()}
