"""Statistics and filters over HDS grid cells."""

from __future__ import annotations

from typing import Iterable

from thaihousing.grid.models import PROBLEM_FIELDS, GridFeature, GridFilters, GridStatistics
from thaihousing.housing.stats import in_range


def calculate_grid_statistics(features: Iterable[GridFeature]) -> GridStatistics:
    grids = list(features)
    if not grids:
        return GridStatistics()

    systems = {n: 0.0 for n in range(1, 8)}
    density_levels: dict[int, int] = {}
    problems = {name: 0 for name in PROBLEM_FIELDS}
    for grid in grids:
        for system, count in grid.housing_systems.items():
            systems[system] = systems.get(system, 0.0) + count
        if grid.grid_class is not None:
            density_levels[grid.grid_class] = density_levels.get(grid.grid_class, 0) + 1
        for name, flagged in grid.problems.items():
            if flagged:
                problems[name] += 1

    total_population = sum(g.population for g in grids)
    return GridStatistics(
        total_grids=len(grids),
        total_population=total_population,
        total_housing=sum(g.housing for g in grids),
        average_density=round(total_population / len(grids), 2),
        housing_systems=systems,
        density_levels=dict(sorted(density_levels.items())),
        problem_areas=problems,
    )


def filter_grids(features: Iterable[GridFeature], filters: GridFilters) -> list[GridFeature]:
    """Apply grid filters.

    ``housing_system`` keeps cells with at least one unit of that system;
    ``density_level`` matches ``Grid_Class`` exactly.

    Raises:
        ValueError: On a non-numeric system/level or a malformed range.
    """
    system = int(filters.housing_system) if filters.housing_system != "all" else None
    level = int(filters.density_level) if filters.density_level != "all" else None

    result = []
    for grid in features:
        if system is not None and grid.housing_systems.get(system, 0) <= 0:
            continue
        if level is not None and grid.grid_class != level:
            continue
        if filters.population_range != "all" and not in_range(grid.population, filters.population_range):
            continue
        result.append(grid)
    return result
