"""Change request model shared by the hosting clients."""

from datetime import datetime
from typing import Optional

from dateutil import parser as dateparser
from pydantic import BaseModel, ConfigDict


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 API timestamp, None for empty values."""
    if not value:
        return None
    return dateparser.isoparse(value)


class ChangeRequest(BaseModel):
    """A merged or closed pull/merge request, as read from the hosting API."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    author: str
    author_url: str
    created_at: datetime
    merged_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    body: str = ""
    url: str = ""
    base_branch: str = ""

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None

    def describe(self) -> str:
        """One-line label used in selection lists."""
        return f"#{self.number} - {self.title}"
