"""Built-in equipment catalog, alias normalization and name-based inference."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from ironcatalog.domain.model import EquipmentCategory, EquipmentRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ironcatalog.domain.ports.persistence import EquipmentRepository

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EquipmentSpec:
    id: str
    name: str
    category: EquipmentCategory
    aliases: tuple[str, ...] = ()
    is_portable: bool = False

    def to_record(self) -> EquipmentRecord:
        return EquipmentRecord(
            id=self.id,
            name=self.name,
            category=self.category,
            aliases=list(self.aliases),
            is_portable=self.is_portable,
        )


BUILTIN_EQUIPMENT: Final[tuple[EquipmentSpec, ...]] = (
    EquipmentSpec(
        "bodyweight",
        "Bodyweight",
        EquipmentCategory.BODYWEIGHT,
        ("body weight", "body only", "none"),
        is_portable=True,
    ),
    EquipmentSpec("barbell", "Barbell", EquipmentCategory.FREE_WEIGHTS),
    EquipmentSpec("dumbbell", "Dumbbell", EquipmentCategory.FREE_WEIGHTS, ("db", "dumbbells"), is_portable=True),
    EquipmentSpec("kettlebell", "Kettlebell", EquipmentCategory.FREE_WEIGHTS, ("kettlebells", "kb"), is_portable=True),
    EquipmentSpec("ez_bar", "EZ Bar", EquipmentCategory.FREE_WEIGHTS, ("ez bar", "e-z curl bar", "curl bar")),
    EquipmentSpec("trap_bar", "Trap Bar", EquipmentCategory.FREE_WEIGHTS, ("trap bar", "hex bar")),
    EquipmentSpec("bench", "Bench", EquipmentCategory.ACCESSORY),
    EquipmentSpec("squat_rack", "Squat Rack", EquipmentCategory.ACCESSORY, ("rack", "squat rack", "power rack")),
    EquipmentSpec("cable_machine", "Cable Machine", EquipmentCategory.MACHINE, ("cable", "cables")),
    EquipmentSpec("machine", "Machine", EquipmentCategory.MACHINE),
    EquipmentSpec("lat_pulldown_machine", "Lat Pulldown Machine", EquipmentCategory.MACHINE, ("lat pulldown",)),
    EquipmentSpec("leg_press_machine", "Leg Press Machine", EquipmentCategory.MACHINE, ("leg press",)),
    EquipmentSpec("leg_extension_machine", "Leg Extension Machine", EquipmentCategory.MACHINE, ("leg extension",)),
    EquipmentSpec("leg_curl_machine", "Leg Curl Machine", EquipmentCategory.MACHINE, ("leg curl",)),
    EquipmentSpec("calf_raise_machine", "Calf Raise Machine", EquipmentCategory.MACHINE, ("calf raise",)),
    EquipmentSpec(
        "pullup_bar",
        "Pull-up Bar",
        EquipmentCategory.ACCESSORY,
        ("pull-up bar", "pull up bar", "chin-up bar"),
        is_portable=True,
    ),
    EquipmentSpec("dip_station", "Dip Station", EquipmentCategory.ACCESSORY, ("dip bar",), is_portable=True),
    EquipmentSpec(
        "resistance_band",
        "Resistance Band",
        EquipmentCategory.ACCESSORY,
        ("band", "bands"),
        is_portable=True,
    ),
    EquipmentSpec("treadmill", "Treadmill", EquipmentCategory.CARDIO),
    EquipmentSpec("stationary_bike", "Stationary Bike", EquipmentCategory.CARDIO, ("bike", "exercise bike")),
    EquipmentSpec("rower", "Rower", EquipmentCategory.CARDIO, ("rowing machine",)),
)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def equipment_key(value: str) -> str:
    """Lower-cased, underscore-joined form used for ids and alias lookups."""

    return _SLUG_RE.sub("_", value.strip().lower()).strip("_")


def _build_alias_index(specs: Iterable[EquipmentSpec]) -> dict[str, str]:
    index: dict[str, str] = {}
    for spec in specs:
        for candidate in (spec.id, spec.name, *spec.aliases):
            index.setdefault(equipment_key(candidate), spec.id)
    return index


EQUIPMENT_ALIASES: Final[dict[str, str]] = _build_alias_index(BUILTIN_EQUIPMENT)
_BUILTIN_BY_ID: Final[dict[str, EquipmentSpec]] = {spec.id: spec for spec in BUILTIN_EQUIPMENT}


def canonical_equipment_id(value: str) -> str | None:
    """Map a free-text equipment label onto a canonical id (``None`` for blanks)."""

    key = equipment_key(value)
    if not key:
        return None
    return EQUIPMENT_ALIASES.get(key, key)


@dataclass(frozen=True, slots=True)
class InferredEquipment:
    required: tuple[str, ...]
    optional: tuple[str, ...] = ()


NAME_OVERRIDES: Final[dict[str, InferredEquipment]] = {
    "bench press": InferredEquipment(("barbell", "bench")),
    "overhead press": InferredEquipment(("barbell",)),
    "hip thrust": InferredEquipment(("barbell",), ("bench",)),
    "goblet squat": InferredEquipment(("dumbbell",)),
    "bulgarian split squat": InferredEquipment(("bodyweight",), ("bench", "dumbbell")),
    "walking lunges": InferredEquipment(("bodyweight",), ("dumbbell",)),
    "push up": InferredEquipment(("bodyweight",)),
    "plank": InferredEquipment(("bodyweight",)),
    "pull up": InferredEquipment(("pullup_bar",)),
    "hanging knee raise": InferredEquipment(("pullup_bar",)),
    "dips": InferredEquipment(("dip_station",)),
    "running": InferredEquipment(("bodyweight",), ("treadmill",)),
    "cycling": InferredEquipment(("stationary_bike",)),
    "rowing machine": InferredEquipment(("rower",)),
    "lat pulldown": InferredEquipment(("lat_pulldown_machine",)),
    "leg press": InferredEquipment(("leg_press_machine",)),
    "leg extension": InferredEquipment(("leg_extension_machine",)),
    "leg curl": InferredEquipment(("leg_curl_machine",)),
    "standing calf raise": InferredEquipment(("calf_raise_machine",)),
}

# (substrings, equipment id); evaluated in order, first occurrence wins the position.
_KEYWORD_RULES: Final[tuple[tuple[tuple[str, ...], str], ...]] = (
    (("barbell",), "barbell"),
    (("trap bar", "hex bar"), "trap_bar"),
    (("ez bar", "ez-bar", "curl bar"), "ez_bar"),
    (("dumbbell",), "dumbbell"),
    (("kettlebell",), "kettlebell"),
    (("cable",), "cable_machine"),
    (("lat pulldown",), "lat_pulldown_machine"),
    (("leg press",), "leg_press_machine"),
    (("leg extension",), "leg_extension_machine"),
    (("leg curl",), "leg_curl_machine"),
    (("calf raise",), "calf_raise_machine"),
    (("pull up", "pull-up", "chin-up", "hanging"), "pullup_bar"),
    (("dip",), "dip_station"),
    (("rowing machine", "rower"), "rower"),
    (("cycling", "bike"), "stationary_bike"),
    (("band",), "resistance_band"),
    (("bench press", "dumbbell bench", "incline", "chest fly"), "bench"),
)


def infer_equipment(name: str) -> InferredEquipment:
    """Guess required/optional equipment from an exercise name."""

    lowered = " ".join(name.lower().split())
    if not lowered:
        return InferredEquipment(())
    override = NAME_OVERRIDES.get(lowered)
    if override is not None:
        return override

    required: list[str] = []
    for needles, equipment_id in _KEYWORD_RULES:
        if equipment_id not in required and any(needle in lowered for needle in needles):
            required.append(equipment_id)
    optional = ("treadmill",) if "running" in lowered else ()
    if not required:
        required.append("bodyweight")
    return InferredEquipment(tuple(required), optional)


@dataclass(slots=True)
class EquipmentResolver:
    """Resolve equipment ids against the persisted catalog, creating unknown entries lazily.

    Lookups go by id first, then by normalized name and alias, so a label like
    ``"Hex Bar"`` never produces a second record next to ``trap_bar``.
    """

    repository: EquipmentRepository
    created: list[EquipmentRecord] = field(default_factory=list[EquipmentRecord])
    _index: dict[str, str] | None = None

    def resolve(self, equipment_ids: Iterable[str]) -> list[str]:
        resolved: list[str] = []
        for raw in equipment_ids:
            equipment_id = self._resolve_one(raw)
            if equipment_id and equipment_id not in resolved:
                resolved.append(equipment_id)
        return resolved

    def _resolve_one(self, raw: str) -> str | None:
        key = equipment_key(raw)
        if not key:
            return None
        index = self._load_index()
        known = index.get(key)
        if known is not None:
            return known
        builtin = _BUILTIN_BY_ID.get(EQUIPMENT_ALIASES.get(key, key))
        if builtin is not None:
            record = builtin.to_record()
        else:
            record = EquipmentRecord(
                id=key,
                name=raw.strip().replace("_", " ").title(),
                category=EquipmentCategory.OTHER,
            )
        self.repository.add(record)
        self.created.append(record)
        for candidate in (record.id, record.name, *record.aliases):
            index.setdefault(equipment_key(candidate), record.id)
        index[key] = record.id
        log.info("Created equipment record %r", record.id)
        return record.id

    def _load_index(self) -> dict[str, str]:
        if self._index is None:
            index: dict[str, str] = {}
            for record in self.repository.list_all():
                for candidate in (record.id, record.name, *record.aliases):
                    index.setdefault(equipment_key(candidate), record.id)
            known_ids = set(index.values())
            for alias_key, equipment_id in EQUIPMENT_ALIASES.items():
                if equipment_id in known_ids:
                    index.setdefault(alias_key, equipment_id)
            self._index = index
        return self._index


def install_builtin_equipment(repository: EquipmentRepository) -> int:
    """Add built-in equipment that is not yet persisted. Returns the number added."""

    added = 0
    for spec in BUILTIN_EQUIPMENT:
        if repository.get(spec.id) is None:
            repository.add(spec.to_record())
            added += 1
    return added
