"""
Unit Tests for the Exterior Ballistics Solver
=============================================
Tests core physics modules for correctness.
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
from dataclasses import replace
from itertools import islice

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ballistics.atmosphere import (
    Atmosphere, isa_temperature, isa_pressure, air_density,
    SEA_LEVEL_TEMP, SEA_LEVEL_PRESSURE, SEA_LEVEL_DENSITY, GRAVITY,
)
from ballistics.drag_model import (
    BcKind, DragTable, DragTableRegistry, drag_force, lookup,
)
from ballistics.errors import ConfigurationError, DragLookupError
from ballistics.frames import (
    SightFrame, X_AXIS, Y_AXIS, Z_AXIS, heading, pivot_x, pivot_z,
    rotate_forward, rotate_inverse,
)
from ballistics.integrator import drop_table, simulate
from ballistics.packet import Packet
from ballistics.projectile import (
    Flags, Projectile, Scope, Shooter, Simulation, Wind, compute_acceleration,
)
from ballistics.units import (
    degrees, feet_per_second, grains, inches, miles_per_hour, moa,
    to_inches, to_moa, yards,
)


NO_FORCES = Flags(drag=False, coriolis=False, gravity=False)
GRAVITY_ONLY = Flags(drag=False, coriolis=False, gravity=True)


class TestUnits:

    def test_length(self):
        assert inches(1.0) == pytest.approx(0.0254)
        assert yards(100.0) == pytest.approx(91.44)
        assert to_inches(0.0254) == pytest.approx(1.0)

    def test_mass_and_speed(self):
        assert grains(7000.0) == pytest.approx(0.45359237)
        assert feet_per_second(1.0) == pytest.approx(0.3048)
        assert miles_per_hour(1.0) == pytest.approx(0.44704)

    def test_angles(self):
        assert degrees(180.0) == pytest.approx(math.pi)
        assert moa(60.0) == pytest.approx(degrees(1.0))
        assert to_moa(degrees(1.0)) == pytest.approx(60.0)


class TestAtmosphere:
    """Verify the atmosphere against standard sea-level values."""

    def test_sea_level_temperature(self):
        assert abs(isa_temperature(0) - 288.15) < 0.01

    def test_sea_level_pressure(self):
        assert abs(isa_pressure(0) - 101325.0) < 1.0

    def test_tropopause_temperature(self):
        """Temperature at 11 km should be ~216.65 K."""
        assert abs(isa_temperature(11000) - 216.65) < 0.5

    def test_pressure_decreases_with_altitude(self):
        assert isa_pressure(5000) < isa_pressure(0)
        assert isa_pressure(10000) < isa_pressure(5000)

    def test_reference_density(self):
        atm = Atmosphere(temperature=SEA_LEVEL_TEMP,
                         pressure=SEA_LEVEL_PRESSURE, humidity=0.0)
        assert atm.rho == pytest.approx(SEA_LEVEL_DENSITY, rel=0.01)

    def test_reference_speed_of_sound(self):
        """Speed of sound at sea level ~340.3 m/s."""
        assert Atmosphere().speed_of_sound == pytest.approx(340.3, rel=0.01)

    def test_humidity_lowers_density(self):
        dry = Atmosphere(humidity=0.0)
        humid = Atmosphere(humidity=1.0)
        assert humid.rho < dry.rho
        assert humid.speed_of_sound > dry.speed_of_sound

    def test_dry_air_has_no_vapor(self):
        atm = Atmosphere(humidity=0.0)
        assert atm.vapor_pressure == 0.0
        assert atm.dry_pressure == atm.pressure

    def test_density_decreases_with_altitude(self):
        rho_0 = Atmosphere.standard(0).rho
        rho_1 = Atmosphere.standard(1000).rho
        rho_3 = Atmosphere.standard(3000).rho
        assert rho_0 > rho_1 > rho_3

    def test_air_density_function(self):
        assert air_density(288.15, 101325.0, 0.0) == pytest.approx(
            Atmosphere().rho)

    @pytest.mark.parametrize('kwargs', [
        {'temperature': 100.0},
        {'temperature': 400.0},
        {'pressure': 0.0},
        {'humidity': -0.1},
        {'humidity': 1.5},
    ])
    def test_invalid_conditions(self, kwargs):
        with pytest.raises(ConfigurationError):
            Atmosphere(**kwargs)


class TestDragModel:
    """Verify drag coefficient interpolation."""

    def test_registry_has_all_standard_tables(self, registry):
        assert len(registry) == 8
        for kind in BcKind:
            assert kind in registry
            assert len(registry.get(kind)) > 2

    def test_registry_accepts_names(self, registry):
        assert registry.get('g7') is registry.get(BcKind.G7)
        assert registry['G1'] is registry.get(BcKind.G1)

    def test_registry_unknown_kind(self, registry):
        assert 'G9' not in registry
        with pytest.raises(ConfigurationError):
            registry.get('G9')

    def test_registry_missing_kind(self, registry):
        partial = DragTableRegistry({BcKind.G1: registry.get(BcKind.G1)})
        assert BcKind.G7 not in partial
        with pytest.raises(ConfigurationError):
            partial.get(BcKind.G7)

    def test_exact_at_every_key(self, registry):
        """Every key below the last returns its tabulated value."""
        for kind in BcKind:
            table = registry.get(kind)
            for mach, cd in list(table.items())[:-1]:
                assert lookup(table, mach) == cd

    def test_bounded_between_adjacent_keys(self, registry):
        for kind in BcKind:
            table = registry.get(kind)
            rows = list(table.items())
            for (m0, c0), (m1, c1) in zip(rows, rows[1:]):
                cd = lookup(table, 0.5 * (m0 + m1))
                assert min(c0, c1) - 1e-12 <= cd <= max(c0, c1) + 1e-12

    def test_linear_midpoint(self):
        table = DragTable([0.0, 1.0, 2.0], [0.2, 0.4, 0.3])
        assert lookup(table, 0.5) == pytest.approx(0.3)
        assert lookup(table, 1.5) == pytest.approx(0.35)
        assert table.cd(1.0) == 0.4

    def test_below_first_key(self, registry):
        table = registry.get(BcKind.G7)
        with pytest.raises(DragLookupError) as exc:
            lookup(table, -0.01)
        assert exc.value.mach == -0.01
        assert exc.value.bounds == table.bounds

    def test_at_and_above_last_key(self, registry):
        table = registry.get(BcKind.G1)
        top = table.bounds[1]
        with pytest.raises(DragLookupError):
            lookup(table, top)
        with pytest.raises(DragLookupError):
            lookup(table, top + 1.0)

    def test_transonic_drag_rise(self, registry):
        """Cd should rise through the transonic region."""
        for kind in BcKind:
            table = registry.get(kind)
            assert table.cd(1.0) > table.cd(0.5)

    def test_table_is_read_only(self, registry):
        table = registry.get(BcKind.G7)
        with pytest.raises(ValueError):
            table.mach[0] = 5.0

    @pytest.mark.parametrize('mach, cd', [
        ([0.0], [0.2]),
        ([0.0, 0.0], [0.2, 0.3]),
        ([1.0, 0.5], [0.2, 0.3]),
        ([0.0, 1.0], [0.2]),
        ([0.0, float('nan')], [0.2, 0.3]),
    ])
    def test_invalid_tables(self, mach, cd):
        with pytest.raises(ConfigurationError):
            DragTable(mach, cd)

    def test_from_pairs(self):
        table = DragTable.from_pairs([[0.0, 0.1], [2.0, 0.3]], name='test')
        assert table.bounds == (0.0, 2.0)
        assert lookup(table, 1.0) == pytest.approx(0.2)

    def test_drag_force_opposes_motion(self):
        """Drag force must oppose velocity direction."""
        v = np.array([100.0, 50.0, 0.0])
        F = drag_force(v, rho=1.225, cd=0.3, area=0.01)
        assert np.dot(F, v) < 0
        assert np.allclose(np.cross(F, v), 0.0)

    def test_drag_force_zero_at_rest(self):
        F = drag_force(np.array([0.0, 0.0, 0.0]), rho=1.225, cd=0.3, area=0.01)
        assert np.allclose(F, 0.0)


class TestFrames:
    """Sight <-> world rotations."""

    def test_round_trip(self):
        rng = np.random.default_rng(7)
        for _ in range(50):
            v = rng.normal(size=3) * 100.0
            pitch = rng.uniform(-math.pi / 2, math.pi / 2)
            bearing = rng.uniform(-2 * math.pi, 2 * math.pi)
            roll = rng.uniform(-math.pi, math.pi)
            world = rotate_forward(v, pitch, bearing, roll)
            assert np.allclose(rotate_inverse(world, pitch, bearing, roll), v)

            frame = SightFrame(pitch, bearing, roll)
            assert np.allclose(frame.to_world(v), world)
            assert np.allclose(frame.to_sight(world), v)
            assert frame.downrange(world) == pytest.approx(v[0])

    def test_matrix_is_orthonormal(self):
        frame = SightFrame(degrees(12.0), degrees(135.0), degrees(-4.0))
        m = frame.matrix
        assert np.allclose(m @ m.T, np.eye(3))
        assert np.linalg.det(m) == pytest.approx(1.0)

    def test_positive_heading_turns_right(self):
        assert np.allclose(heading(X_AXIS, degrees(90.0)), Z_AXIS)
        assert np.allclose(heading(X_AXIS, degrees(-90.0)), -Z_AXIS)

    def test_positive_pitch_raises(self):
        assert np.allclose(pivot_z(X_AXIS, degrees(90.0)), Y_AXIS)

    def test_roll_about_line_of_sight(self):
        assert np.allclose(pivot_x(Y_AXIS, degrees(90.0)), Z_AXIS)
        assert np.allclose(pivot_x(X_AXIS, degrees(37.0)), X_AXIS)

    def test_bearing_east(self):
        frame = SightFrame(bearing=degrees(90.0))
        assert np.allclose(frame.to_world(X_AXIS), Z_AXIS)
        assert np.allclose(frame.to_world(Y_AXIS), Y_AXIS)


class TestProjectile:
    """Verify configuration and force computation."""

    def test_projectile_area(self, reference_projectile):
        expected = np.pi * (inches(0.264) / 2) ** 2
        assert abs(reference_projectile.area - expected) < 1e-12

    def test_form_factor(self, reference_projectile):
        assert reference_projectile.sectional_density == pytest.approx(0.2870, rel=1e-3)
        assert reference_projectile.form_factor == pytest.approx(0.2870 / 0.305, rel=1e-3)

    @pytest.mark.parametrize('field, value', [
        ('caliber', 0.0),
        ('weight', -1.0),
        ('bc', 0.0),
        ('velocity', float('inf')),
    ])
    def test_invalid_projectile(self, reference_projectile, field, value):
        with pytest.raises(ConfigurationError) as exc:
            replace(reference_projectile, **{field: value})
        assert exc.value.name == field

    @pytest.mark.parametrize('factory', [
        lambda: Shooter(latitude=degrees(100.0)),
        lambda: Shooter(pitch=degrees(-95.0)),
        lambda: Shooter(roll=degrees(200.0)),
        lambda: Shooter(gravity=0.0),
        lambda: Wind(speed=-1.0),
        lambda: Wind(yaw=degrees(400.0)),
        lambda: Scope(roll=degrees(190.0)),
        lambda: Scope(height=float('nan')),
    ])
    def test_invalid_configuration(self, factory):
        with pytest.raises(ConfigurationError):
            factory()

    @pytest.mark.parametrize('time_step', [0.0, -1e-5, 0.5, float('nan')])
    def test_invalid_time_step(self, reference_projectile, time_step):
        with pytest.raises(ConfigurationError):
            Simulation(projectile=reference_projectile, time_step=time_step)

    def test_initial_conditions(self, reference_simulation):
        sim = reference_simulation
        assert np.allclose(sim.initial_position, [0.0, -inches(1.5), 0.0])
        assert np.linalg.norm(sim.initial_velocity) == pytest.approx(
            sim.projectile.velocity)

    def test_muzzle_angles(self, reference_simulation):
        sim = reference_simulation.with_muzzle_angles(moa(10.0), moa(-5.0))
        v = sim.initial_velocity
        assert v[1] > 0.0
        assert v[2] < 0.0
        assert np.linalg.norm(v) == pytest.approx(sim.projectile.velocity)
        assert reference_simulation.scope.pitch == 0.0

    def test_wind_stays_horizontal(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile,
                         wind=Wind(speed=5.0, yaw=degrees(30.0)),
                         shooter=Shooter(pitch=degrees(20.0),
                                         bearing=degrees(45.0)))
        assert sim.wind_velocity[1] == pytest.approx(0.0, abs=1e-12)
        assert np.linalg.norm(sim.wind_velocity) == pytest.approx(5.0)

    def test_gravity_only_acceleration(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile, flags=GRAVITY_ONLY)
        acc = compute_acceleration(sim, np.array([800.0, 0.0, 0.0]))
        assert np.allclose(acc, [0.0, -GRAVITY, 0.0])

    def test_no_forces(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile, flags=NO_FORCES)
        acc = compute_acceleration(sim, np.array([800.0, 10.0, -3.0]))
        assert np.allclose(acc, 0.0)

    def test_drag_opposes_relative_velocity(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile,
                         flags=Flags(drag=True, coriolis=False, gravity=False))
        v = np.array([800.0, 20.0, 0.0])
        acc = compute_acceleration(sim, v)
        assert np.dot(acc, v) < 0.0


class TestIntegrator:
    """Verify the trajectory stepper."""

    def test_first_packet_is_initial_state(self, reference_simulation):
        first = next(simulate(reference_simulation))
        assert first.time == 0.0
        assert np.allclose(first.position, reference_simulation.initial_position)
        assert np.allclose(first.velocity, reference_simulation.initial_velocity)

    def test_packets_carry_acceleration(self, reference_simulation):
        first = next(simulate(reference_simulation))
        expected = compute_acceleration(reference_simulation, first.velocity)
        assert np.allclose(first.acceleration, expected)
        assert first.acceleration[0] < 0.0

    def test_simulation_is_iterable(self, reference_simulation):
        assert next(iter(reference_simulation)).time == 0.0

    def test_free_flight(self, reference_projectile):
        """With every force off, x advances by V·dt per step."""
        dt = 1e-3
        sim = Simulation(projectile=reference_projectile, flags=NO_FORCES,
                         time_step=dt)
        n = 500
        last = list(islice(simulate(sim), n + 1))[-1]
        V = reference_projectile.velocity
        assert last.position[0] == pytest.approx(V * n * dt, rel=1e-9)
        assert last.position[1] == pytest.approx(-inches(1.5))
        assert np.allclose(last.velocity, [V, 0.0, 0.0])

    def test_free_fall(self, reference_projectile):
        """Gravity only: vy = -g·t and y = y0 - ½·g·t²."""
        sim = Simulation(projectile=reference_projectile, flags=GRAVITY_ONLY,
                         time_step=1e-3)
        y0 = sim.initial_position[1]
        for packet in islice(simulate(sim), 0, 2001, 250):
            t = packet.time
            assert packet.velocity[1] == pytest.approx(-GRAVITY * t, abs=1e-9)
            assert packet.position[1] == pytest.approx(
                y0 - 0.5 * GRAVITY * t ** 2, abs=1e-9)

    def test_stops_when_range_stops_increasing(self, reference_projectile):
        """Steep uphill shot: down-range along the sight line peaks and stops."""
        pitch = degrees(80.0)
        sim = Simulation(projectile=reference_projectile, flags=GRAVITY_ONLY,
                         shooter=Shooter(pitch=pitch), time_step=0.01)
        packets = list(simulate(sim))
        apex = reference_projectile.velocity / (GRAVITY * math.sin(pitch))
        assert packets[-1].time == pytest.approx(apex, abs=0.05)
        distances = [p.distance() for p in packets]
        assert all(b > a for a, b in zip(distances, distances[1:]))

    def test_max_time(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile, flags=NO_FORCES,
                         time_step=1e-3)
        packets = list(simulate(sim, max_time=0.05))
        assert packets[-1].time <= 0.05 + 1e-12
        assert packets[-1].time >= 0.049

    def test_reruns_are_identical(self, reference_simulation):
        a = list(islice(simulate(reference_simulation), 200))
        b = list(islice(simulate(reference_simulation), 200))
        for pa, pb in zip(a, b):
            assert pa.time == pb.time
            assert np.array_equal(pa.position, pb.position)

    def test_drag_lookup_error_propagates(self, reference_projectile):
        subsonic = DragTable([0.0, 1.0], [0.2, 0.3], name='subsonic')
        sim = Simulation(projectile=replace(reference_projectile,
                                            drag_table=subsonic))
        with pytest.raises(DragLookupError) as exc:
            next(simulate(sim))
        assert exc.value.mach > 1.0

    def test_drag_slows_projectile(self, reference_simulation):
        packets = list(islice(simulate(reference_simulation), 0, 20001, 10000))
        speeds = [p.speed() for p in packets]
        assert speeds[0] > speeds[1] > speeds[2]

    def test_drop_table(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile, time_step=1e-4)
        step = yards(100.0)
        rows = drop_table(sim, step, 0.0, yards(300.0))
        assert len(rows) == 4
        for i, packet in enumerate(rows):
            assert packet.distance() == pytest.approx(i * step, abs=1e-9)
        assert [p.time for p in rows] == sorted(p.time for p in rows)
        # unzeroed: the bullet only drops below the line of sight
        assert all(b.elevation() < a.elevation() for a, b in zip(rows, rows[1:]))

    def test_drop_table_interpolates_between_steps(self, reference_projectile):
        """A row lies between the packets that bracket its range."""
        sim = Simulation(projectile=reference_projectile, time_step=1e-3)
        target = 200.0
        row = drop_table(sim, 1.0, target, target)[0]

        packets = list(simulate(sim, max_time=0.5))
        after = next(i for i, p in enumerate(packets) if p.distance() >= target)
        before, beyond = packets[after - 1], packets[after]

        assert row.distance() == pytest.approx(target, abs=1e-9)
        assert before.time < row.time < beyond.time
        assert min(before.elevation(), beyond.elevation()) <= row.elevation()
        assert row.elevation() <= max(before.elevation(), beyond.elevation())
        assert beyond.speed() < row.speed() < before.speed()
        assert row.acceleration is not None

    def test_drop_table_invalid_step(self, reference_simulation):
        with pytest.raises(ConfigurationError):
            drop_table(reference_simulation, 0.0, 0.0, 100.0)

    def test_wind_from_right_pushes_left(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile,
                         wind=Wind(speed=miles_per_hour(10.0), yaw=degrees(90.0)),
                         flags=Flags(coriolis=False), time_step=1e-4)
        packet = drop_table(sim, 1.0, 300.0, 300.0)[0]
        assert packet.windage() < 0.0

    def test_wind_from_left_pushes_right(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile,
                         wind=Wind(speed=miles_per_hour(10.0), yaw=degrees(-90.0)),
                         flags=Flags(coriolis=False), time_step=1e-4)
        packet = drop_table(sim, 1.0, 300.0, 300.0)[0]
        assert packet.windage() > 0.0

    def test_headwind_slows_projectile(self, reference_projectile):
        calm = Simulation(projectile=reference_projectile,
                          flags=Flags(coriolis=False), time_step=1e-4)
        head = replace(calm, wind=Wind(speed=10.0, yaw=0.0))
        v_calm = drop_table(calm, 1.0, 300.0, 300.0)[0].speed()
        v_head = drop_table(head, 1.0, 300.0, 300.0)[0].speed()
        assert v_head < v_calm

    @pytest.mark.parametrize('latitude, direction', [(45.0, 1.0), (-45.0, -1.0)])
    def test_coriolis_drift(self, reference_projectile, latitude, direction):
        """Shooting north: drift right in the northern hemisphere, left in the south."""
        shooter = Shooter(latitude=degrees(latitude))
        on = Simulation(projectile=reference_projectile, shooter=shooter,
                        time_step=1e-4)
        off = replace(on, flags=Flags(coriolis=False))
        drift = (drop_table(on, 1.0, 500.0, 500.0)[0].windage()
                 - drop_table(off, 1.0, 500.0, 500.0)[0].windage())
        assert direction * drift > 0.0


class TestPacket:
    """Measurements derived from a single packet."""

    @pytest.fixture
    def packet(self, reference_simulation):
        return Packet(reference_simulation, 0.5,
                      np.array([100.0, -0.1, 0.05]),
                      np.array([800.0, 0.0, 0.0]))

    def test_position_components(self, packet):
        assert packet.distance() == pytest.approx(100.0)
        assert packet.elevation() == pytest.approx(-0.1)
        assert packet.windage() == pytest.approx(0.05)
        assert np.allclose(packet.relative_position(), packet.position)

    def test_energy_and_mach(self, packet):
        mass = packet.simulation.projectile.mass
        assert packet.speed() == pytest.approx(800.0)
        assert packet.energy() == pytest.approx(0.5 * mass * 800.0 ** 2)
        assert packet.mach() == pytest.approx(
            800.0 / packet.simulation.atmosphere.speed_of_sound)

    def test_mach_is_relative_to_air(self, reference_projectile):
        """A 10 m/s headwind adds to the air speed but not the ground speed."""
        sim = Simulation(projectile=reference_projectile,
                         wind=Wind(speed=10.0, yaw=0.0))
        packet = Packet(sim, 0.0, np.zeros(3), np.array([800.0, 0.0, 0.0]))
        assert packet.speed() == pytest.approx(800.0)
        assert packet.mach() == pytest.approx(810.0 / sim.speed_of_sound)

    def test_interpolate(self, reference_simulation):
        a = Packet(reference_simulation, 1.0, np.array([100.0, -1.0, 0.0]),
                   np.array([700.0, -10.0, 0.0]), np.array([-500.0, -9.8, 0.0]))
        b = Packet(reference_simulation, 1.5, np.array([200.0, -3.0, 0.4]),
                   np.array([600.0, -14.0, 1.0]), np.array([-400.0, -9.8, 0.0]))
        mid = a.interpolate(b, 150.0)
        assert mid.distance() == pytest.approx(150.0)
        assert mid.time == pytest.approx(1.25)
        assert mid.elevation() == pytest.approx(-2.0)
        assert mid.windage() == pytest.approx(0.2)
        assert np.allclose(mid.velocity, [650.0, -12.0, 0.5])
        assert np.allclose(mid.acceleration, [-450.0, -9.8, 0.0])

    def test_interpolate_without_acceleration(self, packet):
        other = packet._replace(time=1.0, position=packet.position + [10.0, 0.0, 0.0])
        assert packet.interpolate(other, 105.0).acceleration is None

    def test_moa(self, packet):
        expected = to_moa(math.atan2(math.hypot(0.1, 0.05), 100.0))
        assert packet.moa() == pytest.approx(expected)

    def test_vertical_correction_raises_low_impact(self, packet):
        assert packet.vertical_moa(0.001) == pytest.approx(
            to_moa(math.atan(0.001)))

    def test_horizontal_correction_moves_left(self, packet):
        assert packet.horizontal_moa(0.001) == pytest.approx(
            -to_moa(math.atan(0.0005)))

    def test_correction_zero_on_offset(self, packet):
        assert packet.offset_vertical_angle(-0.1, 0.01) == 0.0
        assert packet.offset_horizontal_angle(0.05, 0.01) == 0.0

    def test_relative_position_follows_sight_line(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile,
                         shooter=Shooter(pitch=degrees(10.0),
                                         bearing=degrees(200.0)))
        position = sim.frame.to_world(np.array([250.0, -0.3, 0.02]))
        packet = Packet(sim, 0.3, position, np.zeros(3))
        assert packet.distance() == pytest.approx(250.0)
        assert packet.elevation() == pytest.approx(-0.3)
        assert packet.windage() == pytest.approx(0.02)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
