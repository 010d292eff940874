#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  EXTERIOR BALLISTICS SOLVER — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete solver pipeline for a reference rifle load
  (.264 in, 140 gr, G7 BC 0.305, 2710 ft/s):
    1. Atmosphere check (ISA and moist air)
    2. Drag table sample
    3. Zeroing at 100 yd
    4. Drop table out to 1000 yd
    5. Wind effect demonstration
    6. Coriolis effect demonstration

  Usage:
    python main.py              # Run everything at dt = 1e-5 s
    python main.py --quick      # Coarser timestep (1e-4 s)
    python main.py --verbose    # Show zeroing iterations
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import sys
import time

from ballistics import (
    Atmosphere, BcKind, DragTableRegistry, Flags, Projectile, Shooter,
    Simulation, Wind, drop_table, isa_pressure, isa_temperature,
)
from ballistics.units import (
    degrees, feet_per_second, grains, inches, miles_per_hour,
    to_celsius, to_feet_per_second, to_foot_pounds, to_inches, to_moa,
    to_yards,
    yards,
)


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     EXTERIOR BALLISTICS — POINT-MASS TRAJECTORY SOLVER                ║
║     ─────────────────────────────────────────────────────             ║
║     Gravity · Drag(Mach, G1–GS) · Moist Air · Wind · Coriolis         ║
║     Euler + ½·a·dt² stepping │ Iterative zeroing                      ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def reference_simulation(registry, time_step):
    projectile = Projectile(
        caliber=inches(0.264),
        weight=grains(140.0),
        bc=0.305,
        drag_table=registry.get(BcKind.G7),
        velocity=feet_per_second(2710.0),
    )
    return Simulation(projectile=projectile, time_step=time_step)


def print_drop_table(rows):
    print(f"  {'Range (yd)':>10} {'Drop (in)':>10} {'Wind (in)':>10} "
          f"{'Vel (ft/s)':>11} {'Energy (ft-lb)':>15} {'Time (s)':>9}")
    for packet in rows:
        print(f"  {to_yards(packet.distance()):>10.0f} "
              f"{to_inches(packet.elevation()):>10.2f} "
              f"{to_inches(packet.windage()):>10.2f} "
              f"{to_feet_per_second(packet.speed()):>11.0f} "
              f"{to_foot_pounds(packet.energy()):>15.0f} "
              f"{packet.time:>9.3f}")


def main():
    start_time = time.time()
    quick = '--quick' in sys.argv
    if '--verbose' in sys.argv:
        logging.basicConfig(level=logging.DEBUG,
                            format='  %(name)s: %(message)s')

    time_step = 1e-4 if quick else 1e-5
    registry = DragTableRegistry.standard()

    banner()

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Atmosphere
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Station Atmosphere")
    print(f"  {'Alt (m)':>8} {'T (°C)':>8} {'P (Pa)':>10} {'ρ (kg/m³)':>11} {'a (m/s)':>8}")
    for h in [0, 500, 1000, 2000, 3000]:
        atm = Atmosphere(temperature=isa_temperature(h),
                         pressure=float(isa_pressure(h)))
        print(f"  {h:>8} {to_celsius(atm.temperature):>8.2f} {atm.pressure:>10.0f} "
              f"{atm.rho:>11.5f} {atm.speed_of_sound:>8.1f}")

    humid = Atmosphere(humidity=1.0)
    print(f"\n  Sea level, 100% humidity: ρ = {humid.rho:.5f} kg/m³  "
          f"a = {humid.speed_of_sound:.1f} m/s")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Drag Tables
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Standard Drag Tables")
    for kind in registry.kinds():
        table = registry.get(kind)
        print(f"  {kind:<3s}  Cd @ M0.5={table.cd(0.5):.4f}  "
              f"Cd @ M1.0={table.cd(1.0):.4f}  Cd @ M2.0={table.cd(2.0):.4f}  "
              f"({len(table)} rows)")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Zeroing
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Zero at 100 yd")
    simulation = reference_simulation(registry, time_step)
    zeroed = simulation.zeroed(yards(100.0))
    pitch_moa = to_moa(zeroed.scope.pitch)
    yaw_moa = to_moa(zeroed.scope.yaw)
    print(f"  Time step      : {time_step:g} s")
    print(f"  Muzzle pitch   : {pitch_moa:>8.3f} MOA")
    print(f"  Muzzle yaw     : {yaw_moa:>8.3f} MOA")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Drop Table
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Drop Table (no wind, sea level ISA)")
    rows = drop_table(zeroed, yards(100.0), 0.0, yards(1000.0))
    print_drop_table(rows)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Wind Effects
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Wind Effects at 500 yd (10 mph)")

    wind_cases = [
        ("No Wind", 0.0, 0.0),
        ("Headwind", 10.0, 0.0),
        ("Tailwind", 10.0, 180.0),
        ("From the right", 10.0, 90.0),
        ("From the left", 10.0, -90.0),
    ]
    for label, mph, yaw_deg in wind_cases:
        windy = Simulation(
            projectile=zeroed.projectile,
            wind=Wind(speed=miles_per_hour(mph), yaw=degrees(yaw_deg)),
            scope=zeroed.scope,
            time_step=time_step,
        )
        row = drop_table(windy, 1.0, yards(500.0), yards(500.0))
        if not row:
            print(f"  {label:<18s}  did not reach 500 yd")
            continue
        packet = row[0]
        print(f"  {label:<18s}  Drop: {to_inches(packet.elevation()):>8.2f} in  "
              f"Windage: {to_inches(packet.windage()):>7.2f} in")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Coriolis Effect
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Coriolis Effect at 1000 yd")

    for latitude_deg, bearing_deg in [(45.0, 0.0), (45.0, 90.0), (-45.0, 0.0)]:
        results = []
        for enabled in (False, True):
            sim = Simulation(
                projectile=zeroed.projectile,
                shooter=Shooter(bearing=degrees(bearing_deg),
                                latitude=degrees(latitude_deg)),
                scope=zeroed.scope,
                flags=Flags(coriolis=enabled),
                time_step=time_step,
            )
            results.append(drop_table(sim, 1.0, yards(1000.0), yards(1000.0)))
        if not all(results):
            print(f"  lat {latitude_deg:+.0f}° bearing {bearing_deg:.0f}°: "
                  f"did not reach 1000 yd")
            continue
        off, on = results[0][0], results[1][0]
        print(f"  lat {latitude_deg:+5.0f}°  bearing {bearing_deg:>4.0f}°  "
              f"Δ drop: {to_inches(on.elevation() - off.elevation()):+6.2f} in  "
              f"Δ windage: {to_inches(on.windage() - off.windage()):+6.2f} in")

    # ══════════════════════════════════════════════════════════════════════
    #  SUMMARY
    # ══════════════════════════════════════════════════════════════════════
    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"\n  Total runtime: {elapsed:.1f} seconds\n")


if __name__ == "__main__":
    main()
