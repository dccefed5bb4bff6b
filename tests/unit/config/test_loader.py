from lathe.config import DEFAULT_NAMESPACE, load_config_from_path


def test_missing_pyproject_yields_defaults(tmp_path):
    config = load_config_from_path(tmp_path)

    assert config.source_roots == []
    assert config.extensions == [".clj", ".cljc"]
    assert config.default_namespace == DEFAULT_NAMESPACE == "clojure.core"
    assert config.analyzer_command == []


def test_reads_tool_lathe_table(workspace_factory):
    root = workspace_factory.with_config(
        {
            "source_roots": ["src/main", "src/test"],
            "extensions": [".clj"],
            "analyzer_command": ["clojure", "-M:analyze"],
        }
    ).build()

    config = load_config_from_path(root / "src")

    assert config.source_roots == ["src/main", "src/test"]
    assert config.extensions == [".clj"]
    assert config.default_namespace == "clojure.core"
    assert config.analyzer_command == ["clojure", "-M:analyze"]
    assert config.config_path == (root / "pyproject.toml").resolve()
