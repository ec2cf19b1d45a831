from dataclasses import dataclass

AUTO_STYLIST_ID = "auto"


@dataclass(frozen=True)
class Stylist:
    id: str
    name: str
    focus: str
    role: str = "staff"  # "auto" for the any-stylist sentinel

    @property
    def is_auto(self) -> bool:
        return self.id == AUTO_STYLIST_ID
