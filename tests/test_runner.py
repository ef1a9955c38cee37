"""Tests for background generation."""

import numpy as np

from py_worldgen.core.runner import ErrorMessage, ProgressMessage, ResultMessage, run_generation


class TestRunGeneration:
    """Test the message stream of a background generation."""

    def test_progress_then_result(self, small_settings, small_world):
        messages = list(run_generation(small_settings))

        progress = [m for m in messages if isinstance(m, ProgressMessage)]
        assert isinstance(messages[-1], ResultMessage)
        assert all(isinstance(m, ProgressMessage) for m in messages[:-1])
        assert progress[0].percent == 0
        assert progress[-1].percent == 100
        assert [m.percent for m in progress] == sorted(m.percent for m in progress)

        world = messages[-1].world
        np.testing.assert_array_equal(world.height_map, small_world.height_map)
        assert world.cities == small_world.cities

    def test_error_message(self):
        """Failures end the stream with a single error message."""
        messages = list(run_generation({"map": {"width": -1}}))

        assert len(messages) == 1
        assert isinstance(messages[0], ErrorMessage)
        assert "width" in messages[0].message

    def test_abandoned_iterator(self, small_settings):
        """A caller may stop listening after the first message."""
        stream = run_generation(small_settings)
        first = next(stream)
        stream.close()

        assert isinstance(first, ProgressMessage)
        assert first.stage == "Initializing..."
