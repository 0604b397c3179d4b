"""Search terms and the boolean mode used to combine them."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class SearchMode(str, Enum):
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class SearchTerm:
    """One (field, value) pair; resolves to a single index set."""
    field: Optional[str]
    value: Any
