"""Tests for workspace configuration loading."""

import pytest

from nodegraph.config import init_config, load_config


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        cfg = load_config(tmp_path)
        assert cfg.root == tmp_path
        assert cfg.name == tmp_path.name
        assert cfg.graphs_dir == tmp_path / "graphs"
        assert cfg.projects_dir == tmp_path / "projects"
        assert cfg.docs_dir == tmp_path / "docs"
        assert cfg.node_defs_path == cfg.data_dir / "nodeDefinitions.sample.json"
        assert cfg.server.log_level == "INFO"

    def test_toml_values(self, tmp_path):
        (tmp_path / "nodegraph.toml").write_text(
            '[nodegraph]\nname = "arena"\ngraphs_dir = "content/graphs"\n'
            '[server]\nlog_level = "debug"\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.name == "arena"
        assert cfg.graphs_dir == tmp_path / "content" / "graphs"
        assert cfg.server.log_level == "DEBUG"

    def test_root_found_by_walking_up(self, tmp_path, monkeypatch):
        (tmp_path / "nodegraph.toml").write_text('[nodegraph]\nname = "up"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert load_config().root == tmp_path

    def test_dotenv_overrides_toml(self, tmp_path):
        (tmp_path / "nodegraph.toml").write_text('[nodegraph]\nprojects_dir = "from-toml"\n')
        (tmp_path / ".env").write_text('# comment\nNODEGRAPH_PROJECTS_DIR="from-env"\n')
        assert load_config(tmp_path).projects_dir == tmp_path / "from-env"

    def test_environment_overrides_dotenv(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("NODEGRAPH_GRAPHS_DIR=from-dotenv\n")
        monkeypatch.setenv("NODEGRAPH_GRAPHS_DIR", str(tmp_path / "abs"))
        assert load_config(tmp_path).graphs_dir == tmp_path / "abs"

    def test_workspace_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NODEGRAPH_WORKSPACE", str(tmp_path))
        assert load_config().graphs_dir == tmp_path / "graphs"

    def test_data_dir_moves_sample(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NODEGRAPH_DATA_DIR", "data")
        cfg = load_config(tmp_path)
        assert cfg.data_dir == tmp_path / "data"
        assert cfg.sample_defs_path == tmp_path / "data" / "nodeDefinitions.sample.json"

    def test_ensure_dirs(self, tmp_path):
        cfg = load_config(tmp_path)
        cfg.ensure_dirs()
        assert cfg.graphs_dir.is_dir()
        assert cfg.projects_dir.is_dir()
        assert cfg.docs_dir.is_dir()


class TestInitConfig:
    def test_writes_template(self, tmp_path):
        path = init_config(tmp_path, name="demo")
        assert 'name = "demo"' in path.read_text()
        assert load_config(tmp_path).name == "demo"

    def test_refuses_to_overwrite(self, tmp_path):
        init_config(tmp_path)
        with pytest.raises(FileExistsError):
            init_config(tmp_path)
