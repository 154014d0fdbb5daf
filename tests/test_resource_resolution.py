"""Tests for resource directory and request/environment file lookup."""

from reqprep import core


def _make_config(config_dir=None, **extra_defaults):
    return {"defaults": dict(extra_defaults), "_config_dir": config_dir}


class TestResolvePath:
    def test_returns_first_existing(self, tmp_path):
        a = tmp_path / "a"
        b = tmp_path / "b"
        b.mkdir()
        assert core.resolve_path([a, b]) == b.resolve()

    def test_returns_default_when_nothing_exists(self, tmp_path):
        default = tmp_path / "fallback"
        assert core.resolve_path([tmp_path / "x"], default=default) == default

    def test_first_wins_when_multiple_exist(self, tmp_path):
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.mkdir()
        b.mkdir()
        assert core.resolve_path([a, b]) == a.resolve()


class TestResolveResourceDir:
    def test_cli_override_relative(self, tmp_project):
        d = tmp_project / "mine"
        d.mkdir()
        assert core.resolve_resource_dir("requests", "mine", _make_config()) == d.resolve()

    def test_cli_override_no_fallthrough(self, tmp_project, global_reqprep_dir):
        (tmp_project / "requests").mkdir()
        assert core.resolve_resource_dir("requests", "missing", _make_config()) is None

    def test_config_dir_relative_to_config(self, tmp_project, global_reqprep_dir):
        cfg_dir = tmp_project / "proj"
        (cfg_dir / "reqs").mkdir(parents=True)
        config = _make_config(config_dir=cfg_dir, requests_dir="reqs")
        assert core.resolve_resource_dir("requests", None, config) == (cfg_dir / "reqs").resolve()

    def test_cwd_fallback(self, tmp_project, global_reqprep_dir):
        (tmp_project / "environments").mkdir()
        result = core.resolve_resource_dir("environments", None, _make_config())
        assert result == (tmp_project / "environments").resolve()

    def test_global_fallback(self, tmp_project, global_reqprep_dir):
        (global_reqprep_dir / "requests").mkdir()
        result = core.resolve_resource_dir("requests", None, _make_config())
        assert result == (global_reqprep_dir / "requests").resolve()

    def test_nothing_found(self, tmp_project, global_reqprep_dir):
        assert core.resolve_resource_dir("requests", None, _make_config()) is None


class TestFindResourceFile:
    def test_direct_path(self, tmp_project, global_reqprep_dir):
        f = tmp_project / "thing.yaml"
        f.write_text("endpoint: /")
        assert core.find_resource_file("requests", str(f), _make_config()) == f.resolve()

    def test_path_without_extension(self, tmp_project, global_reqprep_dir):
        f = tmp_project / "thing.yml"
        f.write_text("endpoint: /")
        assert core.find_resource_file("requests", "thing", _make_config()) == f.resolve()

    def test_name_in_resource_dir(self, tmp_project, global_reqprep_dir):
        d = tmp_project / "requests"
        d.mkdir()
        f = d / "login.yaml"
        f.write_text("endpoint: /login")
        assert core.find_resource_file("requests", "login", _make_config()) == f.resolve()

    def test_not_found(self, tmp_project, global_reqprep_dir):
        assert core.find_resource_file("requests", "nope", _make_config()) is None

    def test_search_paths(self, tmp_project, global_reqprep_dir):
        paths = core.resource_search_paths("requests", "login", _make_config())
        assert paths[:2] == ["login", "login.yaml"]
        assert str(global_reqprep_dir / "requests" / "login.yaml") in paths


class TestListResources:
    def test_lists_yaml_files_sorted(self, tmp_project, global_reqprep_dir):
        d = tmp_project / "requests"
        d.mkdir()
        (d / "b.yaml").write_text("{}")
        (d / "a.yml").write_text("{}")
        (d / "notes.txt").write_text("")
        rdir, files = core.list_resources("requests", _make_config())
        assert rdir == d.resolve()
        assert [f.name for f in files] == ["a.yml", "b.yaml"]

    def test_no_directory(self, tmp_project, global_reqprep_dir):
        assert core.list_resources("requests", _make_config()) == (None, [])
