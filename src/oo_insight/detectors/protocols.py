"""Protocol for two-phase design smell detectors."""

from typing import Protocol

from ..model.entities import Class


class Detector(Protocol):
    """Detectors prune with a cheap structural check, then confirm from the store.

    ``is_preliminarily_defective`` only looks at the entity and the corpus and
    never touches the data store. ``confirm_defect`` is only called for entities
    that passed it, after collection was terminated.
    """

    name: str  # registry key
    defect_name: str  # human readable smell name

    def is_preliminarily_defective(self, cls: Class) -> bool: ...

    def confirm_defect(self, entity_path: str, project_path: str) -> bool: ...
