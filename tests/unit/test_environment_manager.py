from cienv.MANAGERS.environment_manager import EnvironmentManager


def test_process_environment_wins(tmp_path):
    env_file = tmp_path / "a.env"
    env_file.write_text("A=from_file\nB=only_file\n")
    context = EnvironmentManager().get_context([str(env_file)], environ={"A": "from_env"})
    assert context["A"] == "from_env"
    assert context["B"] == "only_file"


def test_later_files_override(tmp_path):
    (tmp_path / "a.env").write_text("A=1\n")
    (tmp_path / "b.env").write_text("A=2\n")
    files = [str(tmp_path / "a.env"), str(tmp_path / "b.env")]
    context = EnvironmentManager().get_context(files, environ={})
    assert context == {"A": "2"}


def test_missing_file_skipped(tmp_path):
    context = EnvironmentManager().get_context([str(tmp_path / "missing.env")], environ={"X": "1"})
    assert context == {"X": "1"}
