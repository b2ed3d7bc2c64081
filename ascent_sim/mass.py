"""
Two-Stage Ascent Simulation - Mass and inertia computations.

Centre of gravity and pitch moment of inertia are built from the
surviving stack (active and upper stages, payload, fairing until
jettison), stacked bottom to top. Propellant sits in a column rising
from each tank bottom, just above the engine section.
"""

from typing import List, Optional

from . import constants as C
from .types import MassProperties


def compute_total_mass(state, vehicle) -> float:
    """
    Current vehicle mass (kg).

    payload + fairing (until jettison) + dry and propellant of the
    active and all later stages.
    """
    mass = vehicle.payload.mass
    if not state.fairing_jettisoned:
        mass += vehicle.fairing.mass
    for i in range(state.current_stage, len(vehicle.stages)):
        mass += vehicle.stages[i].dry_mass + max(0.0, state.propellant_remaining[i])
    return mass


def compute_fill_height(stage, propellant: float, propellant_density: float) -> float:
    """Height of the propellant column, capped at the tank height (m)."""
    if propellant <= 0.0:
        return 0.0
    area = stage.cross_section_area
    if area <= C.ZERO_TOLERANCE or propellant_density <= 0.0:
        return 0.0
    return min(stage.tank_length, (propellant / propellant_density) / area)


def compute_stage_cog(stage, propellant: float, propellant_density: float) -> float:
    """
    Stage centre of gravity above the stage base (m).

    Mass-weighted mean of engine section (engine-section midpoint),
    structure (stage midpoint) and propellant (fuel-column midpoint).
    """
    propellant = max(0.0, propellant)
    engine_mass = stage.dry_mass_engine_fraction * stage.dry_mass
    structure_mass = (1.0 - stage.dry_mass_engine_fraction) * stage.dry_mass
    fill = compute_fill_height(stage, propellant, propellant_density)

    total = engine_mass + structure_mass + propellant
    if total <= C.ZERO_TOLERANCE:
        return stage.length / 2.0
    moment = (engine_mass * stage.engine_length / 2.0
              + structure_mass * stage.length / 2.0
              + propellant * (stage.engine_length + fill / 2.0))
    return moment / total


def cylinder_inertia(mass: float, length: float, radius: float) -> float:
    """Transverse MOI of a solid cylinder about its centroid."""
    return mass * length * length / 12.0 + mass * radius * radius / 4.0


def cone_inertia(mass: float, length: float, radius: float) -> float:
    """Transverse MOI of the fairing cone about its centroid."""
    return 0.3 * mass * radius * radius + 0.1 * mass * length * length


def _stack_components(state, vehicle) -> list:
    """
    Surviving components bottom to top as (mass, cog_from_stack_bottom,
    local_inertia, length) tuples.
    """
    components = []
    base = 0.0
    for i in range(state.current_stage, len(vehicle.stages)):
        stage = vehicle.stages[i]
        propellant = max(0.0, state.propellant_remaining[i])
        mass = stage.dry_mass + propellant
        cog = base + compute_stage_cog(stage, propellant, vehicle.propellant_density)
        local = cylinder_inertia(mass, stage.length, stage.diameter / 2.0)
        components.append((mass, cog, local, stage.length))
        base += stage.length

    payload = vehicle.payload
    components.append((payload.mass, base + payload.length / 2.0,
                       cylinder_inertia(payload.mass, payload.length, payload.diameter / 2.0),
                       payload.length))
    base += payload.length

    if not state.fairing_jettisoned:
        fairing = vehicle.fairing
        components.append((fairing.mass, base + fairing.length * C.FAIRING_COG_FRACTION,
                           cone_inertia(fairing.mass, fairing.length, fairing.diameter / 2.0),
                           fairing.length))
    return components


def compute_mass_properties(state, vehicle) -> MassProperties:
    """
    Compute mass, centre of gravity and moment of inertia of the current stack.

    Returns:
        MassProperties dict. COG and stage COGs are measured from the bottom
        of the surviving stack; MOI is about the COG and floored at
        MOI_FLOOR.
    """
    components = _stack_components(state, vehicle)
    total_mass = sum(c[0] for c in components)
    length = sum(c[3] for c in components)

    if total_mass > C.ZERO_TOLERANCE:
        cog = sum(c[0] * c[1] for c in components) / total_mass
    else:
        cog = length / 2.0

    moi = 0.0
    for mass, c_cog, local, _ in components:
        d = c_cog - cog
        moi += local + mass * d * d
    moi = max(moi, C.MOI_FLOOR)

    stage_cogs: List[Optional[float]] = [None] * len(vehicle.stages)
    for offset, i in enumerate(range(state.current_stage, len(vehicle.stages))):
        stage_cogs[i] = components[offset][1]

    return {
        'total_mass': total_mass,
        'cog': cog,
        'moment_of_inertia': moi,
        'length': length,
        'fuel_levels': compute_fuel_levels(state, vehicle),
        'stage_cogs': stage_cogs,
    }


def compute_fuel_levels(state, vehicle) -> List[float]:
    """Fill fraction of each stage relative to its loaded propellant mass."""
    levels = []
    for i, stage in enumerate(vehicle.stages):
        if stage.propellant_mass <= 0.0:
            levels.append(0.0)
        else:
            levels.append(min(1.0, max(0.0, state.propellant_remaining[i] / stage.propellant_mass)))
    return levels
