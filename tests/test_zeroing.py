"""
Zeroing Solver Tests
====================
Uses the reference rifle load (.264 in, 140 gr, G7 0.305, 2710 ft/s) at
ISA sea level with every force enabled.
Run: python -m pytest tests/test_zeroing.py -v
"""

import sys
import os
import logging
from dataclasses import replace

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ballistics.errors import (
    AngleNotChangingError, AngleRangeError, ConfigurationError,
    IterationLimitError, TerminalVelocityError, ZeroingError,
)
from ballistics.integrator import drop_table
from ballistics.packet import Packet
from ballistics.projectile import Simulation
from ballistics.units import degrees, inches, moa, to_inches, to_moa, yards
from ballistics.zeroing import zero


class TestZeroing:

    def test_converges_at_100_yards(self, reference_simulation):
        """Single-digit iteration count; raises IterationLimitError otherwise."""
        pitch, yaw = zero(reference_simulation, yards(100.0), 0.0, 0.0,
                          inches(0.1), max_iterations=9)
        assert 0.0 < pitch < moa(10.0)
        assert abs(yaw) < moa(1.0)

        zeroed = reference_simulation.with_muzzle_angles(pitch, yaw)
        packet = drop_table(zeroed, 1.0, yards(100.0), yards(100.0))[0]
        assert abs(packet.elevation()) <= inches(0.1)
        assert abs(packet.windage()) <= inches(0.1)

    def test_reference_zero(self, reference_simulation, caplog):
        with caplog.at_level(logging.DEBUG, logger='ballistics.zeroing'):
            pitch, _ = zero(reference_simulation, yards(100.0))
        assert to_moa(pitch) == pytest.approx(3.7791, abs=1e-3)
        assert caplog.records[-1].getMessage() == 'zero converged after 2 iterations'

    def test_300_yard_drop(self, reference_simulation):
        zeroed = reference_simulation.zeroed(yards(100.0))
        packet = drop_table(zeroed, 1.0, yards(300.0), yards(300.0))[0]
        elevation = to_inches(packet.elevation())
        assert elevation == pytest.approx(-13.586, abs=0.01)

    def test_reproducible(self, reference_simulation):
        first = zero(reference_simulation, yards(100.0))
        second = zero(reference_simulation, yards(100.0))
        assert first == second

    def test_elevation_offset(self, reference_projectile):
        sim = Simulation(projectile=reference_projectile, time_step=1e-4)
        pitch_0, _ = zero(sim, yards(100.0))
        pitch_2, _ = zero(sim, yards(100.0), elevation_offset=inches(2.0))
        assert pitch_2 > pitch_0

    def test_logs_iterations(self, reference_projectile, caplog):
        sim = Simulation(projectile=reference_projectile, time_step=1e-4)
        with caplog.at_level(logging.DEBUG, logger='ballistics.zeroing'):
            zero(sim, yards(100.0))
        assert any('converged' in r.getMessage() for r in caplog.records)

    def test_beyond_maximum_range(self, reference_simulation):
        sim = replace(reference_simulation, time_step=1e-3)
        with pytest.raises(TerminalVelocityError) as exc:
            zero(sim, yards(10000.0))
        assert exc.value.iterations == 1
        assert isinstance(exc.value, ZeroingError)

    def test_iteration_limit(self, reference_simulation):
        sim = replace(reference_simulation, time_step=1e-4)
        with pytest.raises(IterationLimitError) as exc:
            zero(sim, yards(100.0), max_iterations=1)
        assert exc.value.iterations == 1
        assert exc.value.angle == 0.0

    def test_angle_out_of_range(self, reference_simulation):
        sim = replace(reference_simulation, time_step=1e-4)
        with pytest.raises(AngleRangeError) as exc:
            zero(sim, yards(100.0), elevation_offset=1000.0)
        assert exc.value.iterations == 2
        assert exc.value.angle > moa(45.0 * 60.0)

    def test_angle_not_changing(self, reference_simulation, monkeypatch):
        """No correction on either axis leaves the angles where they were."""
        monkeypatch.setattr(Packet, 'offset_vertical_angle',
                            lambda self, offset, tolerance: 0.0)
        monkeypatch.setattr(Packet, 'offset_horizontal_angle',
                            lambda self, offset, tolerance: 0.0)
        sim = replace(reference_simulation, time_step=1e-4)
        with pytest.raises(AngleNotChangingError) as exc:
            zero(sim, yards(100.0))
        assert exc.value.iterations == 2
        assert exc.value.angle == 0.0

    def test_yaw_out_of_range(self, reference_simulation, monkeypatch):
        monkeypatch.setattr(Packet, 'offset_horizontal_angle',
                            lambda self, offset, tolerance: degrees(100.0))
        sim = replace(reference_simulation, time_step=1e-4)
        with pytest.raises(AngleRangeError) as exc:
            zero(sim, yards(100.0))
        assert exc.value.iterations == 2
        assert exc.value.angle == pytest.approx(degrees(100.0))

    @pytest.mark.parametrize('kwargs', [
        {'distance': 0.0},
        {'distance': -10.0},
        {'distance': 100.0, 'tolerance': 0.0},
        {'distance': 100.0, 'max_iterations': 0},
    ])
    def test_invalid_arguments(self, reference_simulation, kwargs):
        with pytest.raises(ConfigurationError):
            zero(reference_simulation, **kwargs)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
