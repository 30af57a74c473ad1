"""Tests for the lastsort CLI."""

import json
from concurrent.futures import Future
from pathlib import Path

import pytest
from click.testing import CliRunner

from src.cli import sort as sort_cli
from src.cli.sort import _wait_for, cli, dump_tracks, load_playlist_file
from src.host.jobs import SortJobHandle, SortJobResult
from src.settings import AppSettings
from src.sorter.cancellation import CancellationToken
from src.sorter.errors import LookupUnavailableError
from src.sorter.models import TrackRef
from src.sorter.popularity import MetadataSource
from tests.helpers.fakes import BlockingMetadataSource, FakeMetadataSource


PLAYLIST = [
    {"artist": "Low", "title": "Words", "key": "01.flac"},
    {"artist": "Low", "title": "Lullaby", "key": "02.flac"},
    {"artist": "Low", "title": "Sunflower", "key": "03.flac"},
    {"artist": "Low", "title": "Dinosaur Act", "key": "04.flac"},
]

PLAYCOUNTS: dict[str, int | None | Exception] = {
    "Words": 100,
    "Lullaby": 5000,
    "Sunflower": 250,
    "Dinosaur Act": LookupUnavailableError("down", reason="transport_error"),
}


@pytest.fixture
def playlist_file(tmp_path: Path) -> Path:
    """Write the sample playlist to disk."""
    path = tmp_path / "playlist.json"
    path.write_text(json.dumps(PLAYLIST), encoding="utf-8")
    return path


def _use_source(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, source: MetadataSource
) -> None:
    def build(settings: AppSettings, http_client: object) -> MetadataSource:  # noqa: ARG001
        return source

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LASTSORT_MIN_INTERVAL_SECONDS", "0")
    monkeypatch.setenv("LASTSORT_COOLDOWN_SECONDS", "0")
    monkeypatch.setattr(sort_cli, "build_metadata_source", build)
    monkeypatch.setattr(sort_cli, "configure_logging", lambda **kwargs: None)


@pytest.fixture
def fake_source(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> FakeMetadataSource:
    """Replace the Last.fm source and disable pacing."""
    source = FakeMetadataSource(PLAYCOUNTS)
    _use_source(monkeypatch, tmp_path, source)
    return source


@pytest.fixture
def blocking_source(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> BlockingMetadataSource:
    """Replace the Last.fm source with one that holds the job until cancelled."""
    source = BlockingMetadataSource()
    _use_source(monkeypatch, tmp_path, source)
    return source


def _read_titles(path: Path) -> list[str]:
    return [t["title"] for t in json.loads(path.read_text(encoding="utf-8"))]


class TestPlaylistFile:
    """Tests for playlist file helpers."""

    def test_load(self, playlist_file: Path) -> None:
        """Tracks are loaded in file order."""
        tracks = load_playlist_file(playlist_file)

        assert [t.title for t in tracks] == ["Words", "Lullaby", "Sunflower", "Dinosaur Act"]
        assert tracks[0].key == "01.flac"

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Broken JSON is reported as ValueError."""
        path = tmp_path / "bad.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(ValueError, match="invalid JSON"):
            load_playlist_file(path)

    def test_not_a_track_list(self, tmp_path: Path) -> None:
        """Objects with unexpected fields are rejected."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"name": "x"}]), encoding="utf-8")

        with pytest.raises(ValueError, match="not a list of tracks"):
            load_playlist_file(path)

    def test_dump_omits_missing_key(self) -> None:
        """Tracks without a key are written without one."""
        output = dump_tracks([TrackRef(artist="Low", title="Words")])

        assert json.loads(output) == [{"artist": "Low", "title": "Words"}]


class TestSortCommand:
    """Tests for the sort command."""

    def test_sorts_whole_playlist(
        self, playlist_file: Path, tmp_path: Path, fake_source: FakeMetadataSource
    ) -> None:
        """All tracks are ordered by playcount, unknown last."""
        output = tmp_path / "sorted.json"

        result = CliRunner().invoke(
            cli, ["sort", str(playlist_file), "--output", str(output)]
        )

        assert result.exit_code == 0, result.output
        assert _read_titles(output) == ["Lullaby", "Sunflower", "Words", "Dinosaur Act"]
        assert "Sorted 4 tracks (1 without a play count)" in result.output
        assert len(fake_source.calls) == 4

    def test_sorts_range(
        self, playlist_file: Path, tmp_path: Path, fake_source: FakeMetadataSource
    ) -> None:
        """Only the selected range is looked up and reordered."""
        output = tmp_path / "sorted.json"

        result = CliRunner().invoke(
            cli,
            [
                "sort",
                str(playlist_file),
                "--start",
                "0",
                "--end",
                "2",
                "--output",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        assert _read_titles(output) == ["Lullaby", "Words", "Sunflower", "Dinosaur Act"]
        assert [t.title for t in fake_source.calls] == ["Words", "Lullaby"]

    def test_empty_selection(
        self, playlist_file: Path, fake_source: FakeMetadataSource
    ) -> None:
        """A start at or past the end is an input error."""
        result = CliRunner().invoke(cli, ["sort", str(playlist_file), "--start", "4"])

        assert result.exit_code == 2
        assert "selection is empty" in result.output
        assert fake_source.calls == []

    def test_invalid_playlist(
        self, tmp_path: Path, fake_source: FakeMetadataSource
    ) -> None:
        """An unreadable playlist is an input error."""
        path = tmp_path / "bad.json"
        path.write_text("not json", encoding="utf-8")

        result = CliRunner().invoke(cli, ["sort", str(path)])

        assert result.exit_code == 2
        assert fake_source.calls == []

    def test_missing_api_key(
        self, playlist_file: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Without LASTFM_API_KEY the command refuses to run."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("LASTFM_API_KEY", raising=False)
        monkeypatch.setattr(sort_cli, "configure_logging", lambda **kwargs: None)

        result = CliRunner().invoke(cli, ["sort", str(playlist_file)])

        assert result.exit_code == 2
        assert "LASTFM_API_KEY" in result.output


class TestCliGroup:
    """Tests for the command group."""

    def test_version(self) -> None:
        """--version prints the package version."""
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestInterrupt:
    """Tests for Ctrl-C handling while a sort is running."""

    def test_ctrl_c_aborts_without_writing(
        self,
        playlist_file: Path,
        tmp_path: Path,
        blocking_source: BlockingMetadataSource,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Ctrl-C cancels the job, exits 130 and leaves the output unwritten."""
        output = tmp_path / "sorted.json"
        interrupted: list[bool] = []

        def done(handle: SortJobHandle) -> bool:
            if not interrupted:
                blocking_source.started.wait(5.0)
                interrupted.append(True)
                raise KeyboardInterrupt
            return handle._future.done()  # noqa: SLF001

        monkeypatch.setattr(SortJobHandle, "done", property(done))

        result = CliRunner().invoke(
            cli, ["sort", str(playlist_file), "--output", str(output)]
        )

        assert result.exit_code == 130, result.output
        assert "playlist left unchanged" in result.output
        assert not output.exists()
        assert blocking_source.started.is_set()


class TestWaitFor:
    """Tests for waiting on a job from the main thread."""

    def test_interrupt_cancels_then_waits(self) -> None:
        """A KeyboardInterrupt while waiting cancels the job and awaits its result."""
        expected = SortJobResult("p1", "run1", aborted=True)
        calls: list[str] = []

        class InterruptedHandle:
            @property
            def done(self) -> bool:
                calls.append("done")
                raise KeyboardInterrupt

            def cancel(self) -> None:
                calls.append("cancel")

            def wait(self, timeout: float | None = None) -> SortJobResult:  # noqa: ARG002
                calls.append("wait")
                return expected

        result = _wait_for(InterruptedHandle())  # type: ignore[arg-type]

        assert result is expected
        assert calls == ["done", "cancel", "wait"]

    def test_returns_finished_result(self) -> None:
        """A finished job is returned without cancelling it."""
        token = CancellationToken()
        future: Future[SortJobResult] = Future()
        future.set_result(SortJobResult("p1", "run1"))

        result = _wait_for(SortJobHandle("run1", future, token))

        assert result.run_id == "run1"
        assert not token.is_cancelled()
