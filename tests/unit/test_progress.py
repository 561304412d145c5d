from __future__ import annotations

from unittest.mock import patch

from docxgen.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    """Test cases for ProgressTracker class."""

    def test_init_with_tty_enabled(self):
        with patch('docxgen.services.progress.is_tty_enabled', return_value=True), \
             patch('docxgen.services.progress.tqdm') as mock_tqdm:

            tracker = ProgressTracker(5, description="Rows")

            assert tracker.total_rows == 5
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5,
                desc="Rows",
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('docxgen.services.progress.is_tty_enabled', return_value=False):
            tracker = ProgressTracker(5)

            assert tracker.enabled is False
            assert tracker.pbar is None
            # 無効時も呼び出しは安全
            tracker.start_row("P1")
            tracker.finish_row()
            tracker.set_postfix(rows=1)
            tracker.close()
            assert vars(tracker).keys() == {"total_rows", "description", "enabled", "pbar"}

    def test_row_updates(self):
        with patch('docxgen.services.progress.is_tty_enabled', return_value=True), \
             patch('docxgen.services.progress.tqdm') as mock_tqdm:
            pbar = mock_tqdm.return_value

            with ProgressTracker(2, description="Rows") as tracker:
                tracker.start_row("P1")
                pbar.set_description.assert_called_with("Rows (P1)")
                tracker.finish_row()
                pbar.update.assert_called_once_with(1)
                pbar.set_description.assert_called_with("Rows")

            pbar.close.assert_called_once()
            assert tracker.pbar is None
