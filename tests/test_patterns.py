"""
Tests for execution pattern recognition.

2026-03-09 and 2026-03-16 are Mondays (weekday 0).
"""
from __future__ import annotations

from datetime import datetime

import pytest

from habitpulse.services.patterns import (
    ExecutionPattern,
    analyze_patterns,
    extract_patterns,
    optimal_timings,
    pattern_friction_points,
    predict_skip_risks,
)
from habitpulse.services.records import ExecutionSample, ProfileRecord, SystemRecord


def _sample(when: datetime, completion=80.0, energy=20.0, context=60.0, system_id=1) -> ExecutionSample:
    return ExecutionSample(
        system_id=system_id,
        executed_at=when,
        completion_rate=completion,
        energy_cost=energy,
        context_fit=context,
        sequence_effectiveness=50,
        quality=70,
    )


def _pattern(hour=7, weekday=0, energy=80.0, completion=90.0) -> ExecutionPattern:
    return ExecutionPattern(hour=hour, weekday=weekday, energy_level=energy, completion_rate=completion, context_fit=60, samples=1)


class TestExtractPatterns:
    def test_groups_by_hour_and_weekday(self):
        history = [
            _sample(datetime(2026, 3, 9, 7, 15), completion=80, energy=20),
            _sample(datetime(2026, 3, 16, 7, 45), completion=60, energy=40),
            _sample(datetime(2026, 3, 10, 7, 0), completion=100, energy=10),
        ]
        patterns = {(p.hour, p.weekday): p for p in extract_patterns(history)}

        assert set(patterns) == {(7, 0), (7, 1)}
        monday = patterns[(7, 0)]
        assert monday.samples == 2
        assert monday.completion_rate == 70
        assert monday.energy_level == 70
        assert patterns[(7, 1)].energy_level == 90

    def test_empty_history(self):
        assert extract_patterns([]) == []


class TestFrictionPoints:
    def test_low_completion_low_energy_and_friction(self):
        patterns = [
            _pattern(hour=21, completion=30, energy=20),
            _pattern(hour=21, weekday=3, completion=90, energy=80),
        ]
        systems = [
            SystemRecord(id=1, name="Evening review", friction_coefficient=75),
            SystemRecord(id=2, name="Walk", friction_coefficient=20),
        ]
        points = pattern_friction_points(patterns, systems)

        assert [p.type for p in points] == ["energy", "difficulty", "time"]
        assert points[0].severity == 80
        time_point = points[2]
        assert time_point.severity == 70
        assert time_point.frequency == 2
        assert time_point.description == "Low completion rate at 21:00"
        assert points[1].description == "High friction in system: Evening review"

    def test_nothing_to_report(self):
        assert pattern_friction_points([_pattern()], [SystemRecord(id=1, name="Walk")]) == []


class TestSkipRisks:
    NOW = datetime(2026, 3, 9, 8, 0)

    def test_no_similar_slots(self):
        patterns = [_pattern(hour=20, completion=10)]
        assert predict_skip_risks(patterns, [SystemRecord(id=1, name="Walk")], ProfileRecord(), self.NOW) == []

    def test_risk_reported_with_factors(self):
        patterns = [_pattern(hour=7, completion=40, energy=20), _pattern(hour=9, completion=60, energy=50)]
        systems = [
            SystemRecord(id=1, name="Deep work", friction_coefficient=80, effectiveness_score=40),
            SystemRecord(id=2, name="Walk", friction_coefficient=10),
        ]
        profile = ProfileRecord(adaptation=20)
        risks = predict_skip_risks(patterns, systems, profile, self.NOW)

        # base 50; only the high-friction system crosses the line
        assert [r.system_id for r in risks] == [1]
        risk = risks[0]
        assert risk.probability == pytest.approx(74)
        assert risk.factors == [
            "High system friction",
            "Low energy period",
            "Low system effectiveness",
            "Low adaptability to change",
        ]
        assert risk.mitigation == "Break down into smaller, more manageable actions"
        assert risk.timeframe == "today"

    def test_probability_is_capped(self):
        patterns = [_pattern(hour=8, completion=0)]
        risks = predict_skip_risks(patterns, [SystemRecord(id=1, name="X", friction_coefficient=90)], ProfileRecord(), self.NOW)
        assert risks[0].probability == 100


class TestOptimalTimings:
    def test_top_three_with_alternatives(self):
        patterns = [
            _pattern(hour=6, completion=95),
            _pattern(hour=7, completion=99),
            _pattern(hour=8, completion=85),
            _pattern(hour=9, completion=90),
            _pattern(hour=10, completion=82),
            _pattern(hour=11, completion=81),
            _pattern(hour=12, completion=99, energy=50),
        ]
        timings = optimal_timings(patterns)

        assert [t.best_hour for t in timings] == [7, 6, 9]
        assert timings[0].alternatives == [8, 10]
        assert timings[0].system_id == "general"
        assert timings[0].reasoning == "Historical completion rate of 99.0% at this time"

    def test_no_peaks(self):
        assert optimal_timings([_pattern(completion=70)]) == []


class TestAnalyzePatterns:
    def test_empty_history(self):
        analysis = analyze_patterns([], [], ProfileRecord(), datetime(2026, 3, 9, 8, 0))
        assert analysis.patterns == []
        assert analysis.friction_points == []
        assert analysis.skip_risks == []
        assert analysis.optimal_timings == []
