"""Equipment catalog entries referenced by exercises."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import EquipmentCategory


@dataclass(eq=False, kw_only=True)
class EquipmentRecord:
    id: str
    name: str
    category: str = EquipmentCategory.OTHER
    aliases: list[str] = field(default_factory=list[str])
    is_portable: bool = False
