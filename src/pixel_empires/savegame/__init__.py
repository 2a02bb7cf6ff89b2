"""Import and export helpers for Pixel Empires save files."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from zipfile import ZIP_DEFLATED, ZipFile

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from pixel_empires import __version__
from pixel_empires.domain import models as dm
from pixel_empires.domain.catalog import DEFAULT_CATALOG, Catalog
from pixel_empires.domain.engine import EmpireEngine
from pixel_empires.domain.events import EventBus
from pixel_empires.domain.rules_config import DEFAULT_RULES, RulesConfig

EMPIRE_ADAPTER: TypeAdapter[dm.Empire] = TypeAdapter(dm.Empire)


class SaveMetadata(BaseModel):
    """Summary shown in the save slot picker."""

    player_name: str
    slot: int | None = None
    saved_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    turn: int = 1
    resources: dict[str, float] = Field(default_factory=dict)
    units: dict[str, int] = Field(default_factory=dict)
    game_version: str = __version__


class SaveManifest(BaseModel):
    """Top-level manifest stored in a save slot or `.pxempire` archive."""

    format_version: int = 1
    metadata: SaveMetadata
    empire: dm.Empire

    @model_validator(mode="before")
    @classmethod
    def _convert_empire(cls, values: dict[str, Any]) -> dict[str, Any]:
        raw = values.get("empire")
        if raw is not None and not isinstance(raw, dm.Empire):
            values["empire"] = EMPIRE_ADAPTER.validate_python(raw)
        return values

    def model_dump(self, *args: Any, **kwargs: Any) -> dict[str, Any]:
        data = super().model_dump(*args, **kwargs)
        data["empire"] = EMPIRE_ADAPTER.dump_python(self.empire, mode="json")
        return data


MANIFEST_PATH = "pixel_empires/manifest.json"


def export_empire(
    empire: dm.Empire,
    *,
    slot: int | None = None,
    report_history: int = DEFAULT_RULES.combat.report_history,
) -> SaveManifest:
    """Snapshot an in-memory empire into a manifest.

    The snapshot is a detached copy; later engine activity does not leak into
    it.  Only the newest ``report_history`` combat reports are kept.
    """

    snapshot = EMPIRE_ADAPTER.validate_python(EMPIRE_ADAPTER.dump_python(empire))
    del snapshot.combat_reports[report_history:]
    metadata = SaveMetadata(
        player_name=empire.name,
        slot=slot,
        turn=empire.turn,
        resources={str(kind): amount for kind, amount in empire.ledger.snapshot().items()},
        units={str(kind): count for kind, count in empire.units.items()},
    )
    return SaveManifest(metadata=metadata, empire=snapshot)


def import_empire(
    manifest: SaveManifest,
    *,
    catalog: Catalog = DEFAULT_CATALOG,
    rules: RulesConfig = DEFAULT_RULES,
    events: EventBus | None = None,
) -> EmpireEngine:
    """Rebuild an engine from a manifest.

    Storage capacity and the bonus vector are derived values; the engine
    recomputes both from buildings and research instead of trusting the file.
    """

    empire = EMPIRE_ADAPTER.validate_python(EMPIRE_ADAPTER.dump_python(manifest.empire))
    del empire.combat_reports[rules.combat.report_history :]
    return EmpireEngine(empire, catalog=catalog, rules=rules, events=events)


def load_manifest(path: Path | str) -> SaveManifest:
    """Load a savegame manifest from a `.pxempire` archive."""

    zip_path = Path(path)
    with ZipFile(zip_path, "r") as archive:
        try:
            with archive.open(MANIFEST_PATH) as manifest_file:
                payload = json.load(manifest_file)
        except KeyError as exc:  # pragma: no cover - invalid archive
            raise FileNotFoundError("manifest.json not found in archive") from exc
    return SaveManifest.model_validate(payload)


def save_manifest(manifest: SaveManifest, path: Path | str) -> Path:
    """Write a manifest to a `.pxempire` archive."""

    payload = json.dumps(
        manifest.model_dump(mode="json", by_alias=True),
        indent=2,
        sort_keys=True,
    ).encode("utf-8")
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with ZipFile(target, "w", ZIP_DEFLATED) as archive:
        archive.writestr(MANIFEST_PATH, payload)
    return target
