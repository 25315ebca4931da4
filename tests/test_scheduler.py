"""
Tests for the energy-aware scheduler.
"""
from __future__ import annotations

from datetime import date, datetime

import pytest

from habitpulse.services.records import EnergyPattern, ExecutionSample, ProfileRecord, SystemRecord
from habitpulse.services.scheduler import (
    EnergyWindow,
    best_window,
    default_energy_windows,
    energy_windows,
    generate_schedule,
    recommend_slot,
    scheduling_adjustments,
    scheduling_confidence,
    session_guidance,
)

DAY = date(2026, 3, 10)


def _pattern(hour: int, energy: float, focus: float, creativity: float) -> EnergyPattern:
    return EnergyPattern(hour=hour, energy_level=energy, focus_level=focus, creativity_level=creativity)


def _window(start=9, end=12, energy=75.0, focus=80.0, creativity=70.0) -> EnergyWindow:
    return EnergyWindow(start_hour=start, end_hour=end, energy_level=energy, focus_level=focus, creativity_level=creativity)


def _sample(quality: float) -> ExecutionSample:
    return ExecutionSample(
        system_id=1,
        executed_at=datetime(2026, 3, 9, 8, 0),
        completion_rate=80,
        energy_cost=30,
        context_fit=60,
        sequence_effectiveness=50,
        quality=quality,
    )


class TestEnergyWindows:
    @pytest.mark.parametrize("chronotype, first_start, peak_start", [
        ("morning", 6, 6),
        ("evening", 10, 20),
        ("intermediate", 9, 9),
    ])
    def test_chronotype_defaults(self, chronotype, first_start, peak_start):
        windows = energy_windows(ProfileRecord(chronotype=chronotype))
        assert len(windows) == 3
        assert windows[0].start_hour == first_start
        assert max(windows, key=lambda w: w.energy_level).start_hour == peak_start

    def test_unknown_chronotype_uses_intermediate(self):
        assert default_energy_windows("night-owl") == default_energy_windows("intermediate")

    def test_similar_hours_merge_into_one_window(self):
        profile = ProfileRecord(energy_patterns=(
            _pattern(7, 90, 85, 65),
            _pattern(6, 80, 80, 60),
            _pattern(8, 70, 75, 55),
            _pattern(13, 40, 40, 80),
        ))
        first, second = energy_windows(profile)

        assert (first.start_hour, first.end_hour) == (6, 9)
        assert first.energy_level == pytest.approx(77.5)
        assert first.focus_level == pytest.approx(78.75)
        assert first.recommended_activities == ["Deep work", "Complex tasks", "Strategic planning"]

        assert (second.start_hour, second.end_hour) == (13, 14)
        assert second.recommended_activities == ["Creative work", "Brainstorming", "Innovation"]

    def test_low_levels_suggest_light_tasks(self):
        (window,) = energy_windows(ProfileRecord(energy_patterns=(_pattern(21, 30, 30, 30),)))
        assert window.recommended_activities == ["Light tasks", "Organization", "Reflection"]


class TestPlacement:
    def test_habit_goes_to_the_high_focus_window(self):
        system = SystemRecord(id=1, name="Walk")
        windows = default_energy_windows("intermediate")
        assert best_window(system, windows).start_hour == 9

    def test_high_friction_creative_system(self):
        system = SystemRecord(
            id=2,
            name="Creative writing",
            system_type="ritual",
            friction_coefficient=80,
            effectiveness_score=40,
        )
        rec = recommend_slot(system, default_energy_windows("morning"), ProfileRecord(chronotype="morning"))

        assert rec.optimal_time.start_hour == 6
        assert rec.confidence == 68
        assert rec.reasoning == (
            "High energy window supports task completion; "
            "Sufficient energy to overcome system friction; "
            "Aligns with morning chronotype peak performance"
        )
        assert rec.adjustments == []
        assert [w.start_hour for w in rec.alternative_times] == [11, 16]

    def test_alternatives_skip_low_energy_windows(self):
        profile = ProfileRecord(
            chronotype="morning",
            energy_patterns=(_pattern(8, 30, 30, 30), _pattern(14, 90, 90, 50), _pattern(15, 90, 90, 50)),
        )
        rec = recommend_slot(SystemRecord(id=1, name="Read", friction_coefficient=80, effectiveness_score=20), energy_windows(profile), profile)

        assert (rec.optimal_time.start_hour, rec.optimal_time.end_hour) == (14, 16)
        assert rec.alternative_times == []
        assert [a.type for a in rec.adjustments] == ["time_shift"]
        assert rec.adjustments[0].description == "Consider shifting to morning hours for better alignment"

    def test_confidence_is_clamped(self):
        rough = SystemRecord(id=1, name="X", friction_coefficient=100, effectiveness_score=0)
        smooth = SystemRecord(id=2, name="Y", friction_coefficient=0, effectiveness_score=100)
        assert scheduling_confidence(rough, _window(energy=0)) == 30
        assert scheduling_confidence(smooth, _window(energy=100)) == 100

    def test_adjustments_sorted_by_impact(self):
        system = SystemRecord(id=1, name="Lift", friction_coefficient=80)
        adjustments = scheduling_adjustments(system, _window(start=9, energy=50, focus=40), ProfileRecord(chronotype="evening"))
        assert [(a.type, a.impact) for a in adjustments] == [
            ("time_shift", 40),
            ("duration_change", 30),
            ("context_optimization", 25),
        ]
        assert adjustments[0].description == "Consider shifting to evening hours for better alignment"

    def test_plain_reasoning_fallback(self):
        rec = recommend_slot(
            SystemRecord(id=1, name="Inbox zero", system_type="workflow"),
            [_window(start=13, energy=55, focus=50)],
            ProfileRecord(),
        )
        assert rec.reasoning == "Standard scheduling recommendation"


class TestSessionGuidance:
    @pytest.mark.parametrize("work_style, expected", [
        ("sprinter", ["Time-boxed sessions", "Clear start/end points"]),
        ("marathoner", ["Sustainable pace", "Regular breaks"]),
        ("mixed", []),
    ])
    def test_follows_work_style(self, work_style, expected):
        assert session_guidance(ProfileRecord(work_style=work_style)) == expected


class TestGenerateSchedule:
    def test_no_systems(self):
        schedule = generate_schedule(ProfileRecord(), [], [], DAY)
        assert schedule.day == DAY
        assert schedule.recommendations == []
        assert schedule.total_energy_efficiency == 0
        assert schedule.focus_optimization == 0
        assert len(schedule.energy_windows) == 3

    def test_scores_with_neutral_focus_baseline(self):
        schedule = generate_schedule(ProfileRecord(), [SystemRecord(id=1, name="Walk")], [], DAY)

        (rec,) = schedule.recommendations
        assert rec.confidence == 73
        assert schedule.total_energy_efficiency == 55
        assert schedule.focus_optimization == 54

    def test_history_quality_sets_focus_baseline(self):
        history = [_sample(90), _sample(70)]
        schedule = generate_schedule(ProfileRecord(), [SystemRecord(id=1, name="Walk")], history, DAY)
        assert schedule.focus_optimization == 69

    def test_most_confident_first(self):
        systems = [
            SystemRecord(id=1, name="Hard", friction_coefficient=90, effectiveness_score=20),
            SystemRecord(id=2, name="Easy", friction_coefficient=10, effectiveness_score=90),
        ]
        schedule = generate_schedule(ProfileRecord(work_style="marathoner"), systems, [], DAY)
        assert [r.system_id for r in schedule.recommendations] == [2, 1]
        assert schedule.session_guidance == ["Sustainable pace", "Regular breaks"]


class TestScheduleEndpoint:
    def test_without_profile_or_systems(self, client, headers):
        r = client.get("/schedule", params={"day": "2026-03-10"}, headers=headers)
        assert r.status_code == 200
        body = r.json()
        assert body["day"] == "2026-03-10"
        assert body["chronotype"] == "intermediate"
        assert body["recommendations"] == []
        assert [w["start_hour"] for w in body["energy_windows"]] == [9, 14, 19]

    def test_profile_patterns_and_work_style_drive_the_schedule(self, client, headers):
        r = client.put(
            "/profile",
            json={
                "chronotype": "morning",
                "work_style": "sprinter",
                "energy_patterns": [
                    {"hour": 15, "energy_level": 90, "focus_level": 90, "creativity_level": 50},
                    {"hour": 8, "energy_level": 30, "focus_level": 30, "creativity_level": 30},
                    {"hour": 14, "energy_level": 90, "focus_level": 90, "creativity_level": 50},
                ],
            },
            headers=headers,
        )
        assert r.status_code == 200
        assert [p["hour"] for p in r.json()["energy_patterns"]] == [8, 14, 15]

        system_id = client.post("/systems", json={"name": "Deep work"}, headers=headers).json()["id"]

        body = client.get("/schedule", headers=headers).json()
        assert [(w["start_hour"], w["end_hour"]) for w in body["energy_windows"]] == [(8, 9), (14, 16)]
        assert body["session_guidance"] == ["Time-boxed sessions", "Clear start/end points"]

        (rec,) = body["recommendations"]
        assert rec["system_id"] == system_id
        assert rec["optimal_time"]["start_hour"] == 14
        assert rec["confidence"] == 77
        assert [a["type"] for a in rec["adjustments"]] == ["time_shift"]

    def test_pattern_hour_out_of_range(self, client, headers):
        r = client.put(
            "/profile",
            json={"energy_patterns": [{"hour": 24, "energy_level": 50, "focus_level": 50, "creativity_level": 50}]},
            headers=headers,
        )
        assert r.status_code == 422
