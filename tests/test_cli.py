"""Tests for the command line interface on the memory backend."""

import json

import pytest

from src.core.state_manager import DEFAULT_STATE_FILE
from src.main import CondenseCLI
from src.partitioning.registry import KNOWN_CANDIDATES


@pytest.fixture
def edge_list(tmp_path):
    path = tmp_path / "path.txt"
    path.write_text("0 1\n1 2\n2 3\n3 4\n", encoding="utf-8")
    return str(path)


class TestRunCommand:
    """Tests for `run --backend=memory`."""

    def test_prints_rows_and_winner(self, tmp_path, edge_list, capsys):
        state_dir = tmp_path / "state"
        CondenseCLI().run("g", candidates="chains,wcc", backend="memory", edge_list=edge_list, state_dir=str(state_dir))

        output = json.loads(capsys.readouterr().out)
        assert output["winner"] == "wcc"
        assert [row["candidate"] for row in output["results"]] == ["chains", "wcc"]
        assert [row["score"] for row in output["results"]] == [7.0, 5.0]
        assert (state_dir / DEFAULT_STATE_FILE).exists()

    def test_options_are_forwarded(self, tmp_path, edge_list, capsys):
        CondenseCLI().run("g", candidates=("stars",), degree_threshold=1, write=False,
                          backend="memory", edge_list=edge_list, state_dir=str(tmp_path))
        output = json.loads(capsys.readouterr().out)
        assert output["results"][0]["superNodeCount"] == 3

    def test_memory_backend_needs_edge_list(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            CondenseCLI().run("g", backend="memory", state_dir=str(tmp_path))
        assert excinfo.value.code == 2

    def test_unknown_backend(self, tmp_path, edge_list):
        with pytest.raises(SystemExit) as excinfo:
            CondenseCLI().run("g", backend="sqlite", edge_list=edge_list, state_dir=str(tmp_path))
        assert excinfo.value.code == 2

    def test_invalid_error_mode(self, tmp_path, edge_list):
        with pytest.raises(SystemExit) as excinfo:
            CondenseCLI().run("g", error_mode="sometimes", backend="memory", edge_list=edge_list, state_dir=str(tmp_path))
        assert excinfo.value.code == 2


class TestCandidatesCommand:
    """Tests for `candidates`."""

    def test_lists_known_names(self, capsys):
        CondenseCLI().candidates()
        assert json.loads(capsys.readouterr().out) == KNOWN_CANDIDATES
