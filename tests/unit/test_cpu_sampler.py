import sys
import tempfile
import unittest
from unittest import mock
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from sysmon_telemetry.errors import ParseFailure
from sysmon_telemetry.models import CounterSample, CpuState
from sysmon_telemetry.probes import CpuSampler, cpu_percent, parse_cpu_line


def _stat(user, nice, system, idle, iowait=0, irq=0, softirq=0) -> str:
    return (
        f"cpu  {user} {nice} {system} {idle} {iowait} {irq} {softirq} 0 0 0\n"
        f"cpu0 {user} {nice} {system} {idle} {iowait} {irq} {softirq} 0 0 0\n"
        "intr 12345\n"
    )


class ParseCpuLineTests(unittest.TestCase):
    def test_reads_first_aggregate_line(self):
        sample = parse_cpu_line(_stat(10, 2, 5, 100, 3, 1, 1))
        self.assertEqual(sample, CounterSample(10, 2, 5, 100, 3, 1, 1))
        self.assertEqual(sample.total, 122)
        self.assertEqual(sample.idle_total, 100)

    def test_short_line_is_parse_failure(self):
        with self.assertRaises(ParseFailure):
            parse_cpu_line("cpu  1 2 3\n")

    def test_missing_line_is_parse_failure(self):
        with self.assertRaises(ParseFailure):
            parse_cpu_line("intr 1 2 3\n")

    def test_non_numeric_is_parse_failure(self):
        with self.assertRaises(ParseFailure):
            parse_cpu_line("cpu  1 2 x 4 5 6 7\n")


class CpuPercentTests(unittest.TestCase):
    def test_half_busy(self):
        state = CpuState(previous_idle=100, previous_total=200, initialized=True)
        percent, nxt = cpu_percent(state, CounterSample(150, 0, 0, 150, 0, 0, 0))
        self.assertAlmostEqual(percent, 50.0)
        self.assertEqual((nxt.previous_idle, nxt.previous_total), (150, 300))

    def test_zero_diff_total_is_exactly_zero(self):
        state = CpuState(previous_idle=100, previous_total=300, initialized=True)
        percent, _ = cpu_percent(state, CounterSample(150, 0, 0, 100, 50, 0, 0))
        self.assertEqual(percent, 0.0)

    def test_percent_bounded_for_increasing_counters(self):
        for step in range(1, 40):
            busy = (step * 7) % 13
            idle = (step * 5) % 11
            _, state = cpu_percent(CpuState(), CounterSample(step * 10, 0, step, step * 20, 0, 0, 0))
            percent, _ = cpu_percent(state, CounterSample(step * 10 + busy, 0, step, step * 20 + idle, 0, 0, 0))
            self.assertGreaterEqual(percent, 0.0)
            self.assertLessEqual(percent, 100.0)

    def test_counter_reset_starts_new_baseline(self):
        state = CpuState(previous_idle=5000, previous_total=10000, initialized=True)
        percent, nxt = cpu_percent(state, CounterSample(10, 0, 10, 80, 0, 0, 0))
        self.assertEqual(percent, 0.0)
        self.assertEqual(nxt.previous_total, 100)


class CpuSamplerTests(unittest.TestCase):
    def test_two_samples_give_delta_percent(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "stat"
            path.write_text(_stat(100, 0, 100, 800), encoding="utf-8")
            sampler = CpuSampler(path)
            first = sampler.read()
            self.assertTrue(first.baseline)

            path.write_text(_stat(175, 0, 100, 825), encoding="utf-8")
            second = sampler.read()
            self.assertFalse(second.baseline)
            self.assertTrue(second.available)
            self.assertAlmostEqual(second.percent, 75.0)
            self.assertEqual(sampler.state.previous_total, 1100)

    def test_unchanged_counters_are_flagged_baseline(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "stat"
            path.write_text(_stat(100, 0, 100, 800), encoding="utf-8")
            sampler = CpuSampler(path)
            sampler.read()
            again = sampler.read()
            self.assertTrue(again.available)
            self.assertTrue(again.baseline)
            self.assertEqual(again.percent, 0.0)

    def test_file_is_read_while_holding_state_lock(self):
        sampler = CpuSampler("/proc/stat")
        seen = []

        def fake_read(path):
            seen.append(sampler._lock.locked())
            return _stat(100, 0, 100, 800)

        with mock.patch("sysmon_telemetry.probes._read_text", side_effect=fake_read):
            sampler.read()
        self.assertEqual(seen, [True])

    def test_unreadable_file_returns_zero(self):
        sampler = CpuSampler("/nonexistent/proc/stat")
        self.assertEqual(sampler.sample(), 0.0)
        reading = sampler.read()
        self.assertFalse(reading.available)
        self.assertFalse(sampler.state.initialized)

    def test_instances_do_not_share_state(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "stat"
            path.write_text(_stat(100, 0, 100, 800), encoding="utf-8")
            a = CpuSampler(path)
            b = CpuSampler(path)
            a.read()
            self.assertTrue(a.state.initialized)
            self.assertFalse(b.state.initialized)


if __name__ == "__main__":
    unittest.main()
