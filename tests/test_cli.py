"""Tests for configuration, error reporting and end-to-end CLI runs."""

import json
import re

import pytest
from pathlib import Path

from cli import main
from errors import (
    ConfigurationError,
    ERROR_BAD_REGEXP,
    ERROR_INVALID_CONFIG_FILE,
    ERROR_NO_MAIN_APP_FILE_FOUND,
    ERROR_NOT_EXECUTED_IN_NODE_PATH,
    ERROR_REQUIRED_PARAM_NOT_SPECIFIED,
    MapperError,
)
from settings import (
    build_settings,
    compile_ignore_pattern,
    find_config_file,
    find_project_root,
    load_config_file,
    merge_options,
    split_list,
)


BASE_ARGS = [
    "-b", "app",
    "-a", "app.jsx",
    "-c", "containers",
    "-r", "redux",
    "-f", "actions.js",
    "-g", "generated/globalReducers.js",
    "-m", "generated/reducerMap.js",
]

PROJECT = {
    "package.json": "{}",
    "app/app.jsx": "import { boot } from './redux/core/actions';\nimport Routes from './routes';",
    "app/routes.jsx": "const Home = () => System.import('./containers/container1');",
    "app/redux/core/index.js": "export const PRM_REDUCER_NAME = 'core';",
    "app/redux/core/actions.js": "export const boot = () => ({ type: 'BOOT' });",
    "app/redux/core/sagas.js": "export const PRM_SAGA_FILE_FOR_REDUCER = 'core';",
    "app/redux/store1/index.js": "export const PRM_REDUCER_NAME = 'store1';",
    "app/redux/store1/actions.js": "export const load = () => ({ type: 'LOAD' });",
    "app/containers/container1.jsx": (
        "import React from 'react';\n"
        "import { load } from '../redux/store1/actions';\n"
        "import { boot } from '../redux/core/actions';\n"
    ),
    "app/containers/container2.jsx": "import React from 'react';\n",
    "app/containers/container1.test.jsx": "import { load } from '../redux/store1/actions';\n",
}


def _read_map(tree):
    return tree.path("app/generated/reducerMap.js").read_text(encoding="utf-8")


def _container_block(reducer_map: str, key: str) -> str:
    start = reducer_map.index(f'"{key}"')
    next_key = reducer_map.find('"./', start + 1)
    return reducer_map[start:] if next_key == -1 else reducer_map[start:next_key]


class TestProjectRoot:
    """Tests for locating the project root."""

    def test_find_project_root_walks_up(self, tree):
        """Test that the nearest package.json wins."""
        tree.write({"package.json": "{}", "app/src/deep/file.js": ""})

        assert find_project_root(tree.path("app/src/deep")) == tree.root

    def test_not_in_node_project(self, tree):
        """Test the missing marker error."""
        tree.write({"app/file.js": ""})
        if any((parent / "package.json").is_file() for parent in tree.root.parents):
            pytest.skip("temporary directory lives inside a node project")

        with pytest.raises(ConfigurationError) as excinfo:
            find_project_root(tree.path("app"))

        assert excinfo.value.code == ERROR_NOT_EXECUTED_IN_NODE_PATH


class TestConfigFile:
    """Tests for side-car configuration files."""

    def test_no_config_file(self, tree):
        """Test that a missing config file means no options."""
        assert find_config_file(tree.root) is None
        assert load_config_file(None) == {}

    def test_json_config(self, tree):
        """Test loading options from redux-mapper.json."""
        tree.write({"redux-mapper.json": json.dumps({"config": {"basePath": "app", "unknown": 1}})})

        assert load_config_file(find_config_file(tree.root)) == {"basePath": "app"}

    def test_yaml_config(self, tree):
        """Test loading options from redux-mapper.yaml."""
        tree.write({"redux-mapper.yaml": "config:\n  basePath: app\n  reduxPaths:\n    - redux\n    - shared\n"})

        options = load_config_file(find_config_file(tree.root))

        assert options == {"basePath": "app", "reduxPaths": ["redux", "shared"]}
        assert split_list(options["reduxPaths"]) == ["redux", "shared"]

    def test_json_preferred_over_yaml(self, tree):
        """Test config file precedence."""
        tree.write({"redux-mapper.json": "{}", "redux-mapper.yml": "config: {}"})

        assert find_config_file(tree.root) == tree.path("redux-mapper.json")

    @pytest.mark.parametrize("filename,content", [
        ("redux-mapper.json", "{not json"),
        ("redux-mapper.json", "[1, 2]"),
        ("redux-mapper.json", '{"config": "basePath"}'),
        ("redux-mapper.yaml", "config: [unclosed"),
    ])
    def test_invalid_config(self, tree, filename, content):
        """Test that malformed config files are configuration errors."""
        tree.write({filename: content})

        with pytest.raises(ConfigurationError) as excinfo:
            load_config_file(tree.path(filename))

        assert excinfo.value.code == ERROR_INVALID_CONFIG_FILE

    def test_command_line_wins(self):
        """Test that config values only fill unset options."""
        merged = merge_options(
            {"basePath": "cli", "sagaFilename": None, "verboseLogging": None},
            {"basePath": "file", "sagaFilename": "", "verboseLogging": True},
        )

        assert merged == {"basePath": "cli", "sagaFilename": "", "verboseLogging": True}


class TestSettings:
    """Tests for option validation."""

    OPTIONS = {
        "basePath": "app",
        "mainAppPath": "app.jsx",
        "containerPaths": "containers, pages",
        "reduxPaths": "redux",
        "globalReducersOutputPath": "generated/globalReducers.js",
        "reducerMapOutputPath": "generated/reducerMap.js",
    }

    def test_build_settings(self, tree):
        """Test path resolution against the base path."""
        settings = build_settings(dict(self.OPTIONS, actionFilenames="actions.js,selectors.js"), tree.root)

        assert settings.base_path == tree.path("app")
        assert settings.main_app_path == tree.path("app/app.jsx")
        assert settings.container_paths == (tree.path("app/containers"), tree.path("app/pages"))
        assert settings.action_filenames == ("actions.js", "selectors.js")
        assert settings.saga_filename is None
        assert not settings.disable_cache

    def test_missing_required_option(self, tree):
        """Test that each required option is enforced."""
        options = dict(self.OPTIONS)
        del options["reduxPaths"]

        with pytest.raises(ConfigurationError) as excinfo:
            build_settings(options, tree.root)

        assert excinfo.value.code == ERROR_REQUIRED_PARAM_NOT_SPECIFIED
        assert "-reduxPaths" in excinfo.value.format()

    def test_bad_regex(self):
        """Test that an invalid ignore pattern is rejected."""
        with pytest.raises(ConfigurationError) as excinfo:
            compile_ignore_pattern("d????a")

        assert excinfo.value.code == ERROR_BAD_REGEXP

    def test_ignore_pattern_compiled(self):
        """Test a valid ignore pattern."""
        assert compile_ignore_pattern("__tests__").search("./lib/__tests__/a.js")
        assert compile_ignore_pattern("") is None


class TestErrors:
    """Tests for error formatting."""

    def test_format_with_tips(self):
        """Test the troubleshooting output."""
        error = MapperError(ERROR_NO_MAIN_APP_FILE_FOUND, "app/app.jsx", ["Check the -a parameter"])

        text = error.format()

        assert text.startswith("*** ERROR: NO MAIN APPLICATION CONTAINER FOUND: app/app.jsx ***")
        assert "Troubleshooting tips:" in text
        assert re.search(r"^2\. Check the -a parameter$", text, re.MULTILINE)

    def test_format_without_tips(self):
        """Test errors that carry no tips."""
        error = MapperError(ERROR_REQUIRED_PARAM_NOT_SPECIFIED, "-basePath")

        assert error.format() == "*** ERROR: REQUIRED PARAMETER NOT SPECIFIED: -basePath ***\n"


class TestCommandLine:
    """End-to-end runs of the command line tool."""

    def test_show_help(self, capsys):
        """Test that help exits cleanly."""
        assert main(["-h"]) == 0
        assert "--mainAppPath" in capsys.readouterr().out

    def test_container_scenario(self, tree):
        """Test the separated redux layout end to end."""
        tree.write(PROJECT)

        assert main(BASE_ARGS, cwd=tree.path("app")) == 0

        reducer_map = _read_map(tree)
        block = _container_block(reducer_map, "./containers/container1.jsx")
        assert block.count('"reducerName"') == 1
        assert '"reducerName": "store1"' in block
        assert "System.import('../redux/store1/index')" in block
        assert "System.import('../containers/container1')" in block

        assert '"./containers/container1.test.jsx"' not in reducer_map
        assert '"./containers/container2.jsx"' in reducer_map

    def test_global_reducers_excluded_from_containers(self, tree):
        """Test that global reducers are loaded up front and nowhere else."""
        tree.write(PROJECT)

        assert main(BASE_ARGS, cwd=tree.root) == 0

        global_module = tree.path("app/generated/globalReducers.js").read_text(encoding="utf-8")
        assert 'import core from "../redux/core/index";' in global_module
        assert "store1" not in global_module

        reducer_map = _read_map(tree)
        containers = reducer_map[reducer_map.index('"containerSpecific"'):]
        assert '"reducerName": "core"' not in containers
        assert "System.import('../redux/core/sagas')" in reducer_map

    def test_idempotent_output(self, tree):
        """Test that two runs produce byte-identical artifacts."""
        tree.write(PROJECT)

        assert main(BASE_ARGS, cwd=tree.root) == 0
        first = (_read_map(tree), tree.path("app/generated/globalReducers.js").read_bytes())
        assert main(BASE_ARGS + ["-d"], cwd=tree.root) == 0
        second = (_read_map(tree), tree.path("app/generated/globalReducers.js").read_bytes())

        assert first == second

    def test_options_from_config_file(self, tree):
        """Test a run configured entirely from redux-mapper.json."""
        tree.write(PROJECT)
        options = dict(zip(BASE_ARGS[::2], BASE_ARGS[1::2]))
        names = {
            "-b": "basePath", "-a": "mainAppPath", "-c": "containerPaths", "-r": "reduxPaths",
            "-f": "actionFilenames", "-g": "globalReducersOutputPath", "-m": "reducerMapOutputPath",
        }
        tree.write({"redux-mapper.json": json.dumps({"config": {names[k]: v for k, v in options.items()}})})

        assert main([], cwd=tree.root) == 0
        assert '"./containers/container1.jsx"' in _read_map(tree)

    def test_aggregator_scenario(self, tree):
        """Test that one name from a three-reducer barrel yields one reducer."""
        tree.write({
            "package.json": "{}",
            "app/app.jsx": "import React from 'react';",
            "app/redux/ra/index.js": "PRM_REDUCER_NAME = 'ra';",
            "app/redux/rb/index.js": "PRM_REDUCER_NAME = 'rb';",
            "app/redux/rc/index.js": "PRM_REDUCER_NAME = 'rc';",
            "app/lib/a.js": "PRM_ACTION_FILE_FOR_REDUCER = 'ra';",
            "app/lib/b.js": "PRM_ACTION_FILE_FOR_REDUCER = 'rb';",
            "app/lib/c.js": "PRM_ACTION_FILE_FOR_REDUCER = 'rc';",
            "app/lib/index.js": "export { default as a } from './a';\nexport { default as b } from './b';\n"
                                "export { default as c } from './c';\n",
            "app/containers/home.jsx": "import { a } from '../lib';",
        })
        args = [arg for arg in BASE_ARGS if arg not in ("-f", "actions.js")]

        assert main(args, cwd=tree.root) == 0

        block = _container_block(_read_map(tree), "./containers/home.jsx")
        assert block.count('"reducerName"') == 1
        assert '"reducerName": "ra"' in block

    def test_no_reducers_found(self, tree, capsys):
        """Test the no reducers error."""
        tree.write({"package.json": "{}", "app/app.jsx": "", "app/redux/readme.md": "", "app/containers/a.jsx": ""})

        assert main(BASE_ARGS, cwd=tree.root) == 1
        assert "NO REDUCERS FOUND" in capsys.readouterr().err

    def test_main_app_missing(self, tree, capsys):
        """Test the missing main app file error."""
        tree.write({k: v for k, v in PROJECT.items() if k != "app/app.jsx"})

        assert main(BASE_ARGS, cwd=tree.root) == 1
        assert "NO MAIN APPLICATION CONTAINER FOUND" in capsys.readouterr().err

    def test_no_reducer_references(self, tree, capsys):
        """Test the no usage error."""
        tree.write({
            "package.json": "{}",
            "app/app.jsx": "import React from 'react';",
            "app/redux/store1/index.js": "PRM_REDUCER_NAME = 'store1';",
            "app/containers/home.jsx": "import React from 'react';",
        })

        assert main(BASE_ARGS, cwd=tree.root) == 1
        assert "NO REDUCER REFERENCES FOUND" in capsys.readouterr().err

    def test_missing_required_parameter(self, tree, capsys):
        """Test that a missing required option exits with an error."""
        tree.write({"package.json": "{}"})

        assert main(["-b", "app"], cwd=tree.root) == 1
        assert "REQUIRED PARAMETER NOT SPECIFIED" in capsys.readouterr().err

    def test_unexpected_io_error_aborts(self, tree, monkeypatch, capsys):
        """Test that an unexpected read failure ends the run with status 1."""
        tree.write(PROJECT)
        original = Path.read_text

        def flaky(self, *args, **kwargs):
            if self.name == "routes.jsx":
                raise PermissionError(13, "Permission denied", str(self))
            return original(self, *args, **kwargs)

        monkeypatch.setattr(Path, "read_text", flaky)

        assert main(BASE_ARGS, cwd=tree.root) == 1
        assert "Permission denied" in capsys.readouterr().err
        assert not tree.path("app/generated/reducerMap.js").exists()
