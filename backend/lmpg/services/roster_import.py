"""Roster Import — writes parsed roster rows as families, individuals and list entries.

Invariants:
    - Scoped to the caller's church: family reuse and duplicate checks never
      look at another church's rows
    - Families are cached by name for the duration of one import
    - Never commits; the caller commits once so an import is all-or-nothing

Two modes:
    - onboarding (check_duplicates=False): every row becomes a new individual,
      a new family per distinct family name
    - roster import (check_duplicates=True): rows matching an existing person
      (case-insensitive first+last) are reported instead of inserted, and
      existing families are reused by case-insensitive name
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.core.errors import ResourceNotFoundError
from lmpg.core.roster_parser import RosterRow
from lmpg.models.family import Family
from lmpg.models.gathering_list import GatheringList
from lmpg.models.gathering_type import GatheringType
from lmpg.models.individual import Individual
from lmpg.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class ImportOutcome:
    imported: list[dict] = field(default_factory=list)
    duplicates: list[dict] = field(default_factory=list)
    skipped: list[dict] = field(default_factory=list)
    families: dict[str, int] = field(default_factory=dict)

    def summary(self) -> dict:
        return {
            "message": "Import completed",
            "imported": len(self.imported),
            "families": len(self.families),
            "duplicates": len(self.duplicates),
            "skipped": len(self.skipped),
            "details": {
                "imported": self.imported,
                "duplicates": self.duplicates,
                "skipped": self.skipped,
            },
        }


class RosterImporter:
    """Imports rows for one church, optionally onto one gathering list."""

    def __init__(
        self,
        db: AsyncSession,
        user: User,
        gathering_id: int | None,
        check_duplicates: bool = True,
    ):
        self.db = db
        self.user = user
        self.church_id = user.church_id
        self.gathering_id = gathering_id
        self.check_duplicates = check_duplicates

    async def run(self, rows: list[RosterRow], skipped: list[dict] | None = None) -> ImportOutcome:
        if self.gathering_id is not None:
            await _require_gathering(self.db, self.church_id, self.gathering_id)
        outcome = ImportOutcome(skipped=list(skipped or []))
        for row in rows:
            if self.check_duplicates and await self._report_duplicate(row, outcome):
                continue
            family_id = await self._family_id(row.family_name, outcome)
            individual = Individual(
                church_id=self.church_id,
                first_name=row.first_name,
                last_name=row.last_name,
                family_id=family_id,
                created_by=self.user.id,
            )
            self.db.add(individual)
            await self.db.flush()
            if self.gathering_id is not None:
                self.db.add(GatheringList(
                    church_id=self.church_id,
                    gathering_type_id=self.gathering_id,
                    individual_id=individual.id,
                    added_by=self.user.id,
                ))
            outcome.imported.append({
                "id": individual.id,
                "first_name": row.first_name,
                "last_name": row.last_name,
                "family_name": row.family_name,
            })
        await self.db.flush()
        logger.info(
            f"Roster import: {len(outcome.imported)} imported, "
            f"{len(outcome.duplicates)} duplicates, {len(outcome.skipped)} skipped",
            extra={"church_id": self.church_id, "gathering_id": self.gathering_id},
        )
        return outcome

    def _same_name(self, row: RosterRow):
        return (
            func.lower(Individual.first_name) == row.first_name.lower(),
            func.lower(Individual.last_name) == row.last_name.lower(),
        )

    async def _report_duplicate(self, row: RosterRow, outcome: ImportOutcome) -> bool:
        result = await self.db.execute(
            select(
                Individual.id, Individual.first_name, Individual.last_name,
                Family.family_name,
            )
            .outerjoin(Family, Individual.family_id == Family.id)
            .where(Individual.church_id == self.church_id, *self._same_name(row))
            .order_by(Individual.id)
            .limit(1),
        )
        existing = result.first()
        entry = {
            "first_name": row.first_name,
            "last_name": row.last_name,
            "family_name": row.family_name,
        }
        if existing:
            outcome.duplicates.append({**entry, "existing": dict(existing._mapping)})
            return True

        if self.gathering_id is not None:
            on_list = await self.db.execute(
                select(GatheringList.id)
                .join(Individual, GatheringList.individual_id == Individual.id)
                .where(
                    GatheringList.gathering_type_id == self.gathering_id,
                    *self._same_name(row),
                )
                .limit(1),
            )
            if on_list.first():
                outcome.duplicates.append({**entry, "reason": "Already in this gathering"})
                return True
        return False

    async def _family_id(self, family_name: str, outcome: ImportOutcome) -> int | None:
        if not family_name:
            return None
        if family_name in outcome.families:
            return outcome.families[family_name]

        family_id = None
        if self.check_duplicates:
            result = await self.db.execute(
                select(Family.id)
                .where(
                    Family.church_id == self.church_id,
                    func.lower(Family.family_name) == family_name.lower(),
                )
                .order_by(Family.id)
                .limit(1),
            )
            family_id = result.scalar_one_or_none()
        if family_id is None:
            family = Family(
                church_id=self.church_id,
                family_name=family_name,
                family_identifier=family_name,
                created_by=self.user.id,
            )
            self.db.add(family)
            await self.db.flush()
            family_id = family.id
        outcome.families[family_name] = family_id
        return family_id


async def _require_gathering(db: AsyncSession, church_id: str, gathering_id: int) -> None:
    result = await db.execute(
        select(GatheringType.id).where(
            GatheringType.id == gathering_id, GatheringType.church_id == church_id,
        ),
    )
    if result.first() is None:
        raise ResourceNotFoundError("Gathering not found")


async def mass_assign(
    db: AsyncSession, user: User, gathering_id: int, individual_ids: list[int],
) -> dict:
    """Add existing active people to a gathering list, counting each outcome."""
    await _require_gathering(db, user.church_id, gathering_id)
    active = await db.execute(
        select(Individual.id).where(
            Individual.id.in_(individual_ids),
            Individual.church_id == user.church_id,
            Individual.is_active.is_(True),
        ),
    )
    active_ids = set(active.scalars().all())
    listed = await db.execute(
        select(GatheringList.individual_id).where(
            GatheringList.gathering_type_id == gathering_id,
            GatheringList.individual_id.in_(individual_ids),
        ),
    )
    listed_ids = set(listed.scalars().all())

    results = {"assigned": 0, "already_assigned": 0, "not_found": 0}
    for individual_id in dict.fromkeys(individual_ids):
        if individual_id not in active_ids:
            results["not_found"] += 1
        elif individual_id in listed_ids:
            results["already_assigned"] += 1
        else:
            db.add(GatheringList(
                church_id=user.church_id, gathering_type_id=gathering_id,
                individual_id=individual_id, added_by=user.id,
            ))
            results["assigned"] += 1
    await db.commit()
    return results


async def mass_remove(
    db: AsyncSession, user: User, gathering_id: int, individual_ids: list[int],
) -> int:
    result = await db.execute(
        delete(GatheringList).where(
            GatheringList.gathering_type_id == gathering_id,
            GatheringList.church_id == user.church_id,
            GatheringList.individual_id.in_(individual_ids),
        ),
    )
    await db.commit()
    return result.rowcount
