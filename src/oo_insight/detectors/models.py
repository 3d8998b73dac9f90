"""Data models for detector output."""

from dataclasses import asdict, dataclass


@dataclass(frozen=True, order=True)
class Finding:
    """One confirmed design smell on one entity."""

    entity_path: str
    defect_name: str
    project_path: str

    def to_dict(self) -> dict:
        return asdict(self)
