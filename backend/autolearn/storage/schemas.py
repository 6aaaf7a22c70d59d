from datetime import datetime
import json
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ..core.models import Category, RecordSource


class LearnedRecord(BaseModel):
    id: Optional[int] = None
    kind: Category
    content: str
    source: RecordSource = RecordSource.NORMAL_FLOW
    # ORM rows expose the JSON column as metadata_json
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("metadata_json", "metadata"),
    )
    prompt_pattern: Optional[str] = None
    score: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def _decode_metadata(cls, value: Any) -> Any:
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            return json.loads(value)
        return value

    def metadata_text(self) -> str:
        """Metadata as stored: JSON with sorted keys."""
        return json.dumps(self.metadata, sort_keys=True, ensure_ascii=False, default=str)

    class Config:
        from_attributes = True


class LearningStats(BaseModel):
    type_counts: Dict[Category, int] = Field(
        default_factory=lambda: {category: 0 for category in Category}
    )
    total_records: int = 0
    total_score: int = 0
