"""Redis key naming: <namespace>:<category>:<ident>."""
from dataclasses import dataclass

DATA = "data"
SETS = "sets"


@dataclass(frozen=True)
class KeySpace:
    namespace: str

    def make(self, category: str, ident: str) -> str:
        return f"{self.namespace}:{category}:{ident}"

    def data(self, card_id: str) -> str:
        """Hash holding one card's fields."""
        return self.make(DATA, card_id)

    def index(self, field_name: str, encoded_value: str) -> str:
        """Set of card ids whose `field_name` is stored as `encoded_value`."""
        return self.make(SETS, f"{field_name}:{encoded_value}")
