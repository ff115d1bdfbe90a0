"""
Tests for the headless driver loop and the command-line entry point.

The driver only reads control messages between ticks; sleeping is injected
so no test waits on the wall clock.
"""

import sys
import queue
import signal
import pytest
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from habitat.runner import run, StopRequest, PointerEvent
from habitat.simulation import HabitatSimulation
from habitat.data_types import Species, default_world_config
from habitat.__main__ import main
import habitat.__main__ as cli


def make_small_sim(seed: int = 21) -> HabitatSimulation:
    world = default_world_config(cols=12, rows=12, seed=seed)
    world.species[Species.VEGETATION].initial_count = 40
    world.species[Species.HERBIVORE].initial_count = 4
    world.species[Species.CARNIVORE].initial_count = 2
    sim = HabitatSimulation(world)
    sim.initialize()
    return sim


class TestRun:
    """run() loop control"""

    def test_stops_at_max_ticks(self):
        sim = make_small_sim()
        result = run(sim, max_ticks=5, summary_every=0)

        assert result.ticks_run == 5
        assert result.stop_reason is None
        assert sim.tick_count == 5
        assert result.counts == sim.population_counts()

    def test_pending_stop_prevents_any_tick(self):
        sim = make_small_sim()
        control = queue.Queue()
        control.put(StopRequest("window closed"))

        result = run(sim, control=control, max_ticks=10, summary_every=0)

        assert result.ticks_run == 0
        assert result.stop_reason == "window closed"
        assert sim.tick_count == 0

    def test_stop_posted_mid_run_takes_effect_between_ticks(self):
        sim = make_small_sim()
        control = queue.Queue()
        sleeps = []

        def fake_sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) == 3:
                control.put(StopRequest())

        result = run(sim, control=control, tick_interval_ms=2000, summary_every=0, sleep=fake_sleep)

        assert result.ticks_run == 3
        assert result.stop_reason == "requested"
        assert sleeps == [2.0, 2.0, 2.0]
        sim.check_invariants()

    def test_no_sleep_after_last_tick(self):
        sim = make_small_sim()
        sleeps = []

        run(sim, max_ticks=3, tick_interval_ms=500, summary_every=0, sleep=sleeps.append)

        assert sleeps == [0.5, 0.5]

    def test_pointer_events_echoed(self, capsys):
        sim = make_small_sim()
        control = queue.Queue()
        control.put(PointerEvent(x=120, y=45))
        control.put("garbage")

        run(sim, control=control, max_ticks=1, summary_every=0)

        out = capsys.readouterr().out
        assert "(120,45)" in out
        assert "[WARN] Ignoring unknown control message" in out

    def test_summary_interval(self, capsys):
        sim = make_small_sim()
        run(sim, max_ticks=4, summary_every=2)

        lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("Tick")]
        assert len(lines) == 2
        assert "grass=" in lines[0] and "lion=" in lines[0]

    def test_negative_max_ticks_runs_until_stop(self):
        sim = make_small_sim()
        control = queue.SimpleQueue()
        sleeps = []

        def fake_sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) == 2:
                control.put(StopRequest())

        result = run(sim, control=control, max_ticks=-1, tick_interval_ms=10, summary_every=0, sleep=fake_sleep)

        assert result.ticks_run == 2
        assert result.stop_reason == "requested"


class TestMain:
    """python -m habitat"""

    def test_dump_mode(self, capsys):
        assert main(["--test", "--seed", "3"]) == 0

        out = capsys.readouterr().out
        assert "0,0 " in out
        assert "9,9 " in out
        assert "[OK] Spatial index consistent with population" in out

    def test_headless_run(self, capsys):
        assert main(["--ticks", "2", "--interval-ms", "0", "--summary-every", "1", "--seed", "8"]) == 0

        out = capsys.readouterr().out
        assert "[OK] Loaded world" in out
        assert "Tick     2" in out
        assert "[OK] Stopped after 2 ticks (tick limit)" in out

    def test_bad_data_root(self, tmp_path, capsys):
        assert main(["--data-root", str(tmp_path), "--ticks", "1"]) == 2
        assert "[FAIL]" in capsys.readouterr().err

    def test_sigint_posts_interrupt(self, monkeypatch, capsys):
        """Real Ctrl-C handler posts a StopRequest on a reentrant channel"""
        real_run = cli.run
        seen = {}

        def run_with_interrupt(sim, control=None, **kwargs):
            seen['control'] = control
            handler = signal.getsignal(signal.SIGINT)
            handler(signal.SIGINT, None)
            return real_run(sim, control=control, **kwargs)

        monkeypatch.setattr(cli, "run", run_with_interrupt)
        previous = signal.getsignal(signal.SIGINT)

        assert main(["--ticks", "5", "--interval-ms", "0", "--summary-every", "0", "--seed", "8"]) == 0

        assert isinstance(seen['control'], queue.SimpleQueue)
        assert "[OK] Stopped after 0 ticks (interrupt)" in capsys.readouterr().out
        assert signal.getsignal(signal.SIGINT) is previous

    @pytest.mark.parametrize("flag", ["--ticks", "--interval-ms", "--summary-every"])
    def test_negative_counts_rejected(self, flag, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([flag, "-1"])

        assert excinfo.value.code == 2
        assert "must be >= 0" in capsys.readouterr().err

    def test_default_data_pack_ships_inside_package(self):
        root = cli.DEFAULT_DATA_ROOT

        assert root.parent == Path(cli.__file__).parent
        assert (root / "world" / "habitat.yaml").is_file()
        for name in ("grass", "gnu", "lion"):
            assert (root / "species" / f"{name}.yaml").is_file()
        assert (root / "schemas" / "species.schema.json").is_file()
        assert (root / "schemas" / "world.schema.json").is_file()
