from __future__ import annotations

from lumen_engine.cli_progress import StatusTicker, format_duration, status_line


class FakeStream:
    def __init__(self, is_tty: bool) -> None:
        self._isatty = is_tty
        self.buffer: list[str] = []

    def isatty(self) -> bool:  # pragma: no cover - signature mimic
        return self._isatty

    def write(self, data: str) -> None:
        self.buffer.append(data)

    def flush(self) -> None:  # pragma: no cover - no-op for tests
        return None

    @property
    def text(self) -> str:
        return "".join(self.buffer)


def test_non_tty_writes_a_line_per_status_change() -> None:
    stream = FakeStream(is_tty=False)
    status = ["Submitting video job"]
    ticker = StatusTicker("Generating video", lambda: status[0], stream=stream, interval_s=60)
    ticker.start()
    status[0] = "Rendering video (poll 1)"
    ticker.refresh()
    ticker.refresh()
    status[0] = "Downloading video"
    ticker.refresh()
    ticker.stop()

    lines = [line for line in stream.text.splitlines() if line.strip()]
    assert len(lines) == 4
    assert "Generating video: Submitting video job" in lines[0]
    assert "Rendering video (poll 1)" in lines[1]
    assert "Downloading video" in lines[2]
    assert "Finished in" in lines[3]
    assert "\r" not in stream.text


def test_tty_redraws_in_place() -> None:
    stream = FakeStream(is_tty=True)
    ticker = StatusTicker("Generating image", lambda: "Generating image", stream=stream, interval_s=60)
    ticker.start()
    ticker.refresh()
    ticker.stop()
    output = stream.text
    assert output.count("\r") == 3
    assert "\x1b[K" in output
    assert output.count("Finished in") == 1
    assert "Generating image: Generating image" not in output


def test_elapsed_time_comes_from_clock() -> None:
    now = [100.0]
    stream = FakeStream(is_tty=False)
    ticker = StatusTicker("Generating video", stream=stream, interval_s=60, clock=lambda: now[0])
    assert ticker.elapsed() == 0
    ticker.start()
    now[0] = 165.0
    assert ticker.elapsed() == 65
    ticker.stop()
    assert "Finished in 1m 05s" in stream.text


def test_status_line_and_durations() -> None:
    assert status_line("Generating image", "", 7) == "• Generating image (7s • working)"
    assert status_line("Generating video", "Downloading video", 3, done=True).endswith("(3s • done)")
    assert format_duration(3725) == "1h 2m 05s"
