from __future__ import annotations

from dataclasses import replace
from typing import Callable

from threat_music.model.ids import IdGenerator, uuid_ids
from threat_music.model.types import Project, Region


class ProjectStore:
    """Owns the ordered list of regions.

    The store only ever swaps its immutable `Project` for a new one, so a
    snapshot taken before an edit (e.g. by an export in progress) keeps
    seeing the old state. Regions are addressed by id, never by position.
    """

    def __init__(self, *, ids: IdGenerator | None = None, project: Project | None = None) -> None:
        self._ids: IdGenerator = ids or uuid_ids
        self._project = project or Project()

    def snapshot(self) -> Project:
        return self._project

    def regions(self) -> tuple[Region, ...]:
        return self._project.regions

    def __len__(self) -> int:
        return len(self._project.regions)

    def get(self, region_id: str) -> Region | None:
        return self._project.find(region_id)

    def index_of(self, region_id: str) -> int | None:
        for i, r in enumerate(self._project.regions):
            if r.id == region_id:
                return i
        return None

    def region_at(self, index: int) -> Region | None:
        regions = self._project.regions
        if not isinstance(index, int) or not 0 <= index < len(regions):
            return None
        return regions[index]

    def create_region(self) -> Region:
        region = Region(id=self._ids(), name=f"Region {len(self._project.regions)}")
        return self.add_region(region)

    def add_region(self, region: Region) -> Region:
        self._project = replace(self._project, regions=self._project.regions + (region,))
        return region

    def new_region_id(self) -> str:
        return self._ids()

    def rename_region(self, region_id: str, name: str) -> None:
        self.update_region(region_id, lambda r: replace(r, name=str(name)))

    def delete_region(self, region_id: str) -> None:
        remaining = tuple(r for r in self._project.regions if r.id != region_id)
        if len(remaining) != len(self._project.regions):
            self._project = replace(self._project, regions=remaining)

    def update_region(self, region_id: str, fn: Callable[[Region], Region]) -> Region | None:
        """Apply a pure Region -> Region edit to the region with `region_id`.

        Returns the new region, or None when the id is unknown (no-op).
        """

        regions = self._project.regions
        for i, r in enumerate(regions):
            if r.id != region_id:
                continue
            updated = fn(r)
            if updated is r:
                return r
            # identity is fixed at creation
            if updated.id != r.id:
                updated = replace(updated, id=r.id)
            self._project = replace(self._project, regions=regions[:i] + (updated,) + regions[i + 1 :])
            return updated
        return None
