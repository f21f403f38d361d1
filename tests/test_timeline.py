"""Tests for Timeline playback."""

import math

import numpy as np
import pytest

from tweenline.ease import Ease
from tweenline.errors import InterpolationError, TimelineError
from tweenline.timeline import (
    Keyframe,
    MergedTimeline,
    Phase,
    Repeat,
    Timeline,
    TimelineBuilder,
)


def simple(duration=1.0, **kwargs):
    builder = Timeline.builder().duration(duration).keyframe(0.0, x=0.0).keyframe(1.0, x=10.0)
    for name, value in kwargs.items():
        getattr(builder, name)(value)
    return builder.build()


class TestTwoKeyframes:
    def test_linear_interpolation(self):
        timeline = simple()
        assert timeline.value_at(0.0).x == 0.0
        assert timeline.value_at(0.5).x == 5.0
        assert timeline.value_at(1.0).x == 10.0

    def test_default_easing(self):
        timeline = simple(easing=Ease.IN_QUAD)
        assert timeline.value_at(0.5).x == pytest.approx(2.5)

    def test_fields(self):
        assert simple().fields == frozenset({"x"})

    def test_integer_fields_stay_integers(self):
        timeline = Timeline([Keyframe.at(0.0, alpha=0), Keyframe.at(1.0, alpha=255)])
        assert timeline.value_at(0.25).alpha == 64

    def test_numpy_vector_field(self):
        timeline = (
            Timeline.builder()
            .keyframe(0.0, pos=np.array([0.0, 0.0]))
            .keyframe(1.0, pos=np.array([2.0, 4.0]))
            .build()
        )
        np.testing.assert_allclose(timeline.value_at(0.5).pos, [1.0, 2.0])


class TestRepeat:
    def test_once_clamps_to_final_value(self):
        timeline = simple()
        assert timeline.value_at(2.0).x == 10.0
        assert timeline.value_at(100.0).x == 10.0

    def test_once_reports_finished(self):
        timeline = simple()
        assert not timeline.is_finished(0.99)
        assert timeline.is_finished(1.0)
        assert timeline.position(1.0).phase is Phase.ENDED

    def test_infinite_is_periodic(self):
        timeline = simple(duration=2.0, repeat=Repeat.infinite())
        assert timeline.value_at(2.5) == timeline.value_at(0.5)
        assert timeline.value_at(10.5) == timeline.value_at(0.5)
        assert not timeline.is_finished(1000.0)

    def test_infinite_vector_field_is_periodic(self):
        timeline = (
            Timeline.builder()
            .duration(2.0)
            .repeat(Repeat.infinite())
            .keyframe(0.0, pos=np.array([0.0, 0.0]))
            .keyframe(1.0, pos=np.array([4.0, 8.0]))
            .build()
        )
        assert timeline.value_at(2.5) == timeline.value_at(0.5)
        assert timeline.value_at(2.5) != timeline.value_at(1.0)

    def test_count_loops_then_ends(self):
        timeline = simple(repeat=Repeat.count(2))
        assert timeline.value_at(1.5) == timeline.value_at(0.5)
        assert timeline.position(1.5).cycle == 1
        assert not timeline.is_finished(1.99)
        assert timeline.is_finished(2.0)
        assert timeline.value_at(2.0).x == 10.0

    def test_total_duration(self):
        assert simple(duration=2.0, delay=1.0, repeat=Repeat.count(3)).total_duration == 7.0
        assert simple(repeat=Repeat.infinite()).total_duration == math.inf

    def test_repeat_factories(self):
        assert Repeat.once().cycles == 1
        assert Repeat.count(4).cycles == 4
        assert Repeat.infinite().is_infinite

    @pytest.mark.parametrize("n", [0, -1, 1.5, True])
    def test_invalid_count(self, n):
        with pytest.raises(TimelineError):
            Repeat.count(n)


class TestDelay:
    def test_before_delay_returns_start_values(self):
        timeline = simple(delay=1.0)
        assert timeline.value_at(0.5) == timeline.value_at(0.0)
        assert timeline.value_at(0.5).x == 0.0
        assert timeline.position(0.5).phase is Phase.NOT_STARTED

    def test_delay_shifts_playback(self):
        timeline = simple(delay=1.0)
        assert timeline.value_at(1.5).x == 5.0
        assert timeline.is_finished(2.0)

    def test_delay_applies_once(self):
        timeline = simple(delay=1.0, repeat=Repeat.infinite())
        assert timeline.value_at(2.5).x == 5.0


class TestReverse:
    def test_ping_pong_within_cycle(self):
        timeline = simple(duration=2.0, reverse=True)
        assert timeline.value_at(0.5).x == 5.0
        assert timeline.value_at(1.0).x == 10.0
        assert timeline.value_at(1.5).x == 5.0
        assert timeline.position(1.5).reversing

    def test_ends_at_start(self):
        timeline = simple(duration=2.0, reverse=True)
        assert timeline.is_finished(2.0)
        assert timeline.value_at(2.0).x == 0.0


class TestPartialKeyframes:
    def test_forward_fill_keeps_untouched_field_interpolating(self):
        timeline = (
            Timeline.builder()
            .keyframe(0.0, x=0.0, y=0.0)
            .keyframe(0.5, y=10.0)
            .keyframe(1.0, x=10.0, y=0.0)
            .build()
        )
        assert timeline.value_at(0.25) == {"x": 2.5, "y": 5.0}
        assert timeline.value_at(0.5) == {"x": 5.0, "y": 10.0}
        assert timeline.value_at(0.75) == {"x": 7.5, "y": 5.0}

    def test_keyframe_easing_governs_incoming_segment(self):
        timeline = (
            Timeline.builder()
            .keyframe(0.0, x=0.0)
            .keyframe(0.5, x=10.0, easing=Ease.IN_QUAD)
            .keyframe(1.0, x=20.0)
            .build()
        )
        assert timeline.value_at(0.25).x == pytest.approx(2.5)
        assert timeline.value_at(0.75).x == pytest.approx(15.0)

    def test_start_and_end_fallbacks(self):
        timeline = (
            Timeline.builder()
            .start_values(x=0.0)
            .end_values(x=20.0)
            .keyframe(0.5, x=5.0)
            .build()
        )
        assert timeline.value_at(0.25).x == pytest.approx(2.5)
        assert timeline.value_at(0.75).x == pytest.approx(12.5)

    def test_defaults_cover_both_ends(self):
        timeline = Timeline.builder().defaults(x=1.0).keyframe(0.5, x=3.0).build()
        assert timeline.value_at(0.0).x == 1.0
        assert timeline.value_at(1.0).x == 1.0

    def test_fallbacks_do_not_override_keyframes(self):
        timeline = Timeline.builder().defaults(x=100.0).keyframe(0.0, x=0.0).keyframe(1.0, x=10.0).build()
        assert timeline.value_at(0.5).x == 5.0


class TestStartOverride:
    def test_replaces_offset_zero_values(self):
        timeline = simple()
        assert timeline.value_at(0.0, start={"x": 4.0}).x == 4.0
        assert timeline.value_at(0.5, start={"x": 4.0}).x == pytest.approx(7.0)
        assert timeline.value_at(1.0, start={"x": 4.0}).x == 10.0

    def test_only_first_cycle_is_blended(self):
        timeline = simple(repeat=Repeat.infinite())
        assert timeline.value_at(1.5, start={"x": 4.0}).x == 5.0

    def test_reverse_half_uses_authored_values(self):
        timeline = simple(duration=2.0, reverse=True, repeat=Repeat.infinite())
        assert timeline.value_at(1.5, start={"x": 4.0}).x == 5.0

    def test_fields_outside_start_are_unchanged(self):
        timeline = Timeline.builder().keyframe(0.0, x=0.0, y=0.0).keyframe(1.0, x=10.0, y=10.0).build()
        assert timeline.value_at(0.5, start={"x": 4.0}) == {"x": 7.0, "y": 5.0}


class TestConstructionErrors:
    def test_no_keyframes(self):
        with pytest.raises(TimelineError):
            Timeline([])

    @pytest.mark.parametrize("offset", [-0.1, 1.5])
    def test_offset_out_of_range(self, offset):
        with pytest.raises(TimelineError):
            Keyframe.at(offset, x=1.0)

    def test_duplicate_offsets(self):
        with pytest.raises(TimelineError):
            TimelineBuilder().keyframe(0.0, x=0.0).keyframe(0.5, x=1.0).keyframe(0.5, x=2.0).keyframe(1.0, x=3.0).build()

    def test_out_of_order_offsets(self):
        with pytest.raises(TimelineError):
            TimelineBuilder().keyframe(1.0, x=0.0).keyframe(0.0, x=1.0).build()

    def test_missing_start_coverage(self):
        with pytest.raises(TimelineError):
            TimelineBuilder().keyframe(0.5, x=0.0).keyframe(1.0, x=1.0).build()

    def test_missing_end_coverage(self):
        with pytest.raises(TimelineError):
            TimelineBuilder().keyframe(0.0, x=0.0, y=0.0).keyframe(1.0, x=1.0).build()

    @pytest.mark.parametrize("duration", [0.0, -1.0, math.inf])
    def test_bad_duration(self, duration):
        with pytest.raises(TimelineError):
            simple(duration=duration)

    def test_negative_delay(self):
        with pytest.raises(TimelineError):
            simple(delay=-0.5)

    def test_unknown_easing(self):
        with pytest.raises(TimelineError):
            simple(easing="linear")
        with pytest.raises(TimelineError):
            Keyframe.at(0.5, easing="in_quad", x=1.0)

    def test_empty_keyframe(self):
        with pytest.raises(TimelineError):
            Keyframe.at(0.5)

    def test_non_interpolatable_value(self):
        with pytest.raises(InterpolationError):
            TimelineBuilder().keyframe(0.0, label="a").keyframe(1.0, label="b").build()
        with pytest.raises(InterpolationError):
            TimelineBuilder().keyframe(0.0, visible=False).keyframe(1.0, visible=True).build()


class TestMergedTimeline:
    def setup_method(self):
        self.fade = simple()
        self.spin = (
            Timeline.builder()
            .duration(2.0)
            .repeat(Repeat.infinite())
            .keyframe(0.0, angle=0.0)
            .keyframe(1.0, angle=360.0)
            .build()
        )

    def test_combines_fields(self):
        merged = MergedTimeline.of(self.fade, self.spin)
        assert merged.fields == frozenset({"x", "angle"})
        assert merged.value_at(0.5) == {"x": 5.0, "angle": 90.0}

    def test_each_component_keeps_its_timing(self):
        merged = MergedTimeline.of(self.fade, self.spin)
        assert merged.value_at(3.0) == {"x": 10.0, "angle": 180.0}
        assert not merged.is_finished(3.0)

    def test_later_component_wins(self):
        other = Timeline.builder().keyframe(0.0, x=100.0).keyframe(1.0, x=200.0).build()
        assert MergedTimeline.of(self.fade, other).value_at(0.5).x == 150.0

    def test_finished_when_all_finished(self):
        short = Timeline.builder().duration(0.5).keyframe(0.0, y=0.0).keyframe(1.0, y=1.0).build()
        merged = MergedTimeline.of(self.fade, short)
        assert not merged.is_finished(0.75)
        assert merged.is_finished(1.0)

    def test_sample_reads_components_at_one_position(self):
        merged = MergedTimeline.of(self.fade, self.spin)
        assert merged.sample(self.fade.position(0.5)) == {"x": 5.0, "angle": 180.0}

    def test_sample_later_component_wins(self):
        other = Timeline.builder().keyframe(0.0, x=100.0).keyframe(1.0, x=200.0).build()
        merged = MergedTimeline.of(self.fade, other)
        assert merged.sample(self.fade.position(0.5)) == {"x": 150.0}

    def test_sample_applies_start(self):
        merged = MergedTimeline.of(self.fade)
        assert merged.sample(self.fade.position(0.5), start={"x": 4.0}).x == 7.0

    def test_needs_timelines(self):
        with pytest.raises(TimelineError):
            MergedTimeline.of()
