"""Demo script: fly the guided ascent and print the event timeline and phase changes."""
import logging

import numpy as np

from ascent_sim import Simulation, MissionMode, create_default_config
from ascent_sim.main import SimulationLog

logging.basicConfig(level=logging.WARNING)

config = create_default_config()
sim = Simulation(config, mode=MissionMode.GUIDED)
sim.launch()
log = SimulationLog()

print("===== EVENT TIMELINE =====")
done = False
while not done and sim.state.elapsed_time < config.max_time:
    for event in sim.tick(config.dt):
        print(f"  {event}")
        if event.type.name in ('ORBIT_ACHIEVED', 'MISSION_FAILURE'):
            done = True
    log.append(sim)
    nxt = sim.get_next_event()
    if nxt is not None and int(sim.state.elapsed_time) % 100 == 0:
        print(f"    next: {nxt['name']} in {nxt['time_to_event']:.0f}s")

print()
print("===== PHASE TIMELINE =====")
times = np.array(log.time)
alts = np.array(log.altitude)
vels = np.array(log.speed)
prev_phase = None
for i, phase in enumerate(log.phase_name):
    if phase != prev_phase:
        print(f"  t={times[i]:8.1f}s | Alt={alts[i]:8.1f} km | "
              f"V={vels[i]:8.1f} m/s | Phase: {phase}")
        prev_phase = phase

orbit = sim.get_orbit()
print()
print(f"Final orbit: {orbit['periapsis'] / 1000:.1f} x {orbit['apoapsis'] / 1000:.1f} km, "
      f"e={orbit['eccentricity']:.4f}")
print(f"Peak dynamic pressure: {sim.state.max_q / 1000:.1f} kPa")
