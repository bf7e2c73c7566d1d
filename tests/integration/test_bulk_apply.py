"""Integration tests for applying one expression across media items."""

import math

import pytest
from structlog.testing import capture_logs

from markertime.core.expression import TimeExpression
from markertime.core.media import Chapter, Marker, MarkerType
from markertime.core.reasons import InvalidReason
from markertime.core.time_input import apply_shortcut, implicit_end_text


@pytest.fixture
def episodes() -> dict[str, tuple[list[Marker], list[Chapter]]]:
    """Return markers and chapters for three episodes of a season."""
    return {
        "s01e01": (
            [
                Marker(marker_type=MarkerType.INTRO, start=0, end=30000),
                Marker(marker_type=MarkerType.CREDITS, start=600000, end=660000),
            ],
            [
                Chapter(name="Cold Open", start=0, end=90000),
                Chapter(name="Opening Credits", start=90000, end=120000),
                Chapter(name="Episode", start=120000, end=660000),
            ],
        ),
        "s01e02": (
            [Marker(marker_type=MarkerType.CREDITS, start=1200000, end=1300000)],
            [
                Chapter(name="Opening Credits", start=0, end=45000),
                Chapter(name="Episode", start=45000, end=1300000),
            ],
        ),
        "s01e03": (
            [Marker(marker_type=MarkerType.INTRO, start=5000, end=35000)],
            [Chapter(name="Episode", start=0, end=1400000)],
        ),
    }


@pytest.mark.integration
class TestBulkApply:
    """Parse once without a media item, then evaluate per episode."""

    def test_marker_reference_per_episode(self, episodes):
        template = TimeExpression()
        state = template.parse("=C1S-5000")

        assert template.ms() is None
        assert template.to_string() == "=C1S-5000"

        results = {}
        for key, (markers, chapters) in episodes.items():
            expression = TimeExpression(markers, chapters).update_state(state)
            results[key] = expression.ms(final=True)

        assert results["s01e01"] == 595000
        assert results["s01e02"] == 1195000
        assert math.isnan(results["s01e03"])

    def test_each_application_is_logged(self, episodes):
        state = TimeExpression().parse("=C1S-5000")

        with capture_logs() as logs:
            for markers, chapters in episodes.values():
                TimeExpression(markers, chapters).update_state(state)

        applied = [log for log in logs if log["event"] == "state_applied"]
        assert [(log["valid"], log["resolved"]) for log in applied] == [
            (True, True),
            (True, True),
            (False, False),
        ]

    def test_invalid_episode_reports_reason(self, episodes):
        state = TimeExpression().parse("=C1S-5000")
        markers, chapters = episodes["s01e03"]

        resolved = TimeExpression(markers, chapters).update_state(state).state

        assert not resolved.valid
        assert resolved.invalid_reason == InvalidReason.bad_reference_index(
            "marker", 1, "credits markers"
        )

    def test_chapter_name_per_episode(self, episodes):
        state = TimeExpression(is_end=True).parse("=Ch(Opening*)")

        ends = [
            TimeExpression(markers, chapters, is_end=True).update_state(state).ms()
            for markers, chapters in episodes.values()
        ]

        assert ends[:2] == [120000, 45000]
        assert math.isnan(ends[2])

    def test_bare_marker_nudged_on_commit(self, episodes):
        state = TimeExpression().parse("=I1")
        markers, chapters = episodes["s01e01"]
        expression = TimeExpression(markers, chapters).update_state(state)

        assert expression.ms() == 30000
        assert expression.ms(final=True) == 30001

    def test_template_state_untouched(self, episodes):
        template = TimeExpression()
        state = template.parse("=Ch2S+1:00")

        for markers, chapters in episodes.values():
            expression = TimeExpression(markers, chapters).update_state(state)
            expression.set_ms(0)

        assert template.state.equals(state, strict=True)
        assert template.to_string() == "=Ch2S+1:00"


@pytest.mark.integration
class TestEditingFlow:
    """Typing, shortcuts and implied end values for a single marker."""

    def test_start_then_implied_end(self, episodes):
        markers, chapters = episodes["s01e01"]
        start = TimeExpression(markers, chapters)
        end = TimeExpression(markers, chapters, is_end=True)

        start_state = start.parse("=Ch(Opening*)")
        end_text = implicit_end_text(start_state, end)

        assert start.ms(final=True) == 90000
        assert end_text == "=Ch(Opening*)"
        assert end.ms(final=True) == 120000

    def test_shortcuts_then_reparse(self, episodes):
        markers, chapters = episodes["s01e01"]
        start = TimeExpression(markers, chapters)
        start.parse("=I1E")

        text = apply_shortcut(start, "p")
        assert text == "=I1E+0:10"
        text = apply_shortcut(start, "]")
        assert text == "=I1E+0:11"

        fresh = TimeExpression(markers, chapters)
        fresh.parse(text)
        assert fresh.ms() == 41000
        assert fresh.state.equals(start.state)

    def test_rendered_text_hits_parse_cache(self, episodes):
        markers, chapters = episodes["s01e01"]
        start = TimeExpression(markers, chapters)
        start.parse("=I1E + 10000")

        rendered = start.to_string()
        with capture_logs() as logs:
            start.parse(rendered)

        assert rendered == "=I1E+10000"
        assert logs == [
            {"event": "parse_cache_hit", "text": rendered, "log_level": "debug"}
        ]

    def test_invalid_input_is_logged(self):
        with capture_logs() as logs:
            state = TimeExpression().parse("=I1+C1")

        assert not state.valid
        assert logs[0]["event"] == "expression_invalid"
        assert logs[0]["reason"] == InvalidReason.multiple_references()
