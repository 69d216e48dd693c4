"""Tests for the package-manager adapters, driven by canned command output."""

import json
from pathlib import Path

import pytest

from toolsweep.errors import IntrospectionParseFailure, SourceUnavailable
from toolsweep.models import ToolRecord, ToolSource
from toolsweep.scanner.cargo import CargoAdapter, parse_crates_toml, parse_install_list
from toolsweep.scanner.go import GoAdapter, parse_build_info
from toolsweep.scanner.npm import (
    NpmAdapter,
    global_modules_dir,
    manifest_declares_bin,
    parse_npm_list,
    view_output_declares_bin,
)
from toolsweep.scanner.pip import PipAdapter, parse_pip_list, parse_required_by, parse_show
from toolsweep.scanner.registry import ADAPTER_TYPES, build_adapters

NPM_LIST = json.dumps({
    "name": "lib",
    "dependencies": {
        "left-pad": {"version": "1.3.0"},
        "@vue/cli": {"version": "5.0.8"},
        "typescript": {"version": "5.3.3"},
    },
})

PIP_LIST = json.dumps([
    {"name": "requests", "version": "2.31.0"},
    {"name": "black", "version": "24.1.0"},
    {"name": "httpx", "version": "0.27.0"},
])

PIP_SHOW = """Name: requests
Version: 2.31.0
Summary: Python HTTP for Humans.
Requires: certifi, charset-normalizer, idna, urllib3
Required-by: httpx
---
Name: black
Version: 24.1.0
Requires: click, mypy-extensions
Required-by:
---
Name: httpx
Version: 0.27.0
Requires: anyio, certifi, Requests
Required-by:
"""


def _pkg(modules: Path, name: str, manifest: dict | None, payload: int = 0) -> Path:
    d = modules / name
    d.mkdir(parents=True)
    if manifest is not None:
        (d / "package.json").write_text(json.dumps(manifest))
    if payload:
        (d / "index.js").write_bytes(b"x" * payload)
    return d


def _tool(full_name: str, install_path: str = "") -> ToolRecord:
    return ToolRecord(name=full_name, full_name=full_name, source=ToolSource.NPM, install_path=install_path)


# --- npm ---------------------------------------------------------------------


def test_parse_npm_list_keeps_output_order():
    assert parse_npm_list(NPM_LIST) == [
        ("left-pad", "1.3.0"),
        ("@vue/cli", "5.0.8"),
        ("typescript", "5.3.3"),
    ]


def test_parse_npm_list_no_dependencies():
    assert parse_npm_list('{"name": "lib"}') == []


def test_parse_npm_list_malformed():
    with pytest.raises(IntrospectionParseFailure):
        parse_npm_list("npm ERR! something broke")
    with pytest.raises(IntrospectionParseFailure):
        parse_npm_list("")
    with pytest.raises(IntrospectionParseFailure):
        parse_npm_list("[1, 2]")


def test_global_modules_dir():
    assert global_modules_dir("") is None
    assert global_modules_dir("/usr/local").parts[-2:] in (("lib", "node_modules"), ("local", "node_modules"))


def test_view_output_declares_bin():
    assert view_output_declares_bin("") is False
    assert view_output_declares_bin("null\n") is False
    assert view_output_declares_bin('{"tsc": "bin/tsc"}') is True
    assert view_output_declares_bin('"cli.js"') is True


def test_manifest_declares_bin(tmp_path):
    assert manifest_declares_bin(_pkg(tmp_path, "a", {"name": "a", "bin": {"a": "cli.js"}})) is True
    assert manifest_declares_bin(_pkg(tmp_path, "b", {"name": "b"})) is False
    assert manifest_declares_bin(_pkg(tmp_path, "c", None)) is None


@pytest.mark.asyncio
async def test_npm_list_packages_sizes_each_package(tmp_path, fake_runner, home_config):
    prefix = tmp_path / "prefix"
    modules = global_modules_dir(str(prefix))
    _pkg(modules, "left-pad", {"name": "left-pad"}, payload=100)
    _pkg(modules, "@vue/cli", {"name": "@vue/cli", "bin": {"vue": "bin/vue.js"}}, payload=50)
    runner = fake_runner({
        ("npm", "config", "get", "prefix"): f"{prefix}\n",
        ("npm", "list", "-g"): NPM_LIST,
    })
    raws = await NpmAdapter(runner, home_config).list_packages()
    by_name = {r.full_name: r for r in raws}
    assert list(by_name) == ["left-pad", "@vue/cli", "typescript"]
    assert by_name["left-pad"].size_bytes == 100 + len(json.dumps({"name": "left-pad"}))
    assert by_name["@vue/cli"].install_path == str(modules / "@vue/cli")
    assert by_name["typescript"].size_bytes == 0  # not on disk
    assert by_name["left-pad"].installed_at is not None


@pytest.mark.asyncio
async def test_npm_list_without_measure_skips_sizing(tmp_path, fake_runner, home_config):
    prefix = tmp_path / "prefix"
    _pkg(global_modules_dir(str(prefix)), "left-pad", {"name": "left-pad"}, payload=100)
    runner = fake_runner({
        ("npm", "config", "get", "prefix"): str(prefix),
        ("npm", "list", "-g"): NPM_LIST,
    })
    raws = await NpmAdapter(runner, home_config).list_packages(measure=False)
    assert all(r.size_bytes == 0 for r in raws)
    assert raws[0].install_path.endswith("left-pad")


@pytest.mark.asyncio
async def test_npm_without_prefix_leaves_path_empty(fake_runner, home_config):
    runner = fake_runner({("npm", "list", "-g"): NPM_LIST})
    raws = await NpmAdapter(runner, home_config).list_packages()
    assert [r.install_path for r in raws] == ["", "", ""]
    assert [r.size_bytes for r in raws] == [0, 0, 0]


@pytest.mark.asyncio
async def test_npm_missing_binary_raises_unavailable(fake_runner, home_config):
    adapter = NpmAdapter(fake_runner(missing={"npm"}), home_config)
    with pytest.raises(SourceUnavailable):
        await adapter.list_packages()


@pytest.mark.asyncio
async def test_npm_evidence_manifest_then_registry(tmp_path, fake_runner, home_config):
    modules = tmp_path / "node_modules"
    with_bin = _pkg(modules, "tldr", {"name": "tldr", "bin": "cli.js"})
    without_bin = _pkg(modules, "left-pad", {"name": "left-pad"})
    runner = fake_runner({
        ("npm", "view", "remote-lib", "bin", "--json"): "\n",
        ("npm", "view", "remote-cli", "bin", "--json"): '{"rc": "bin/rc"}',
    })
    records = [
        _tool("tldr", str(with_bin)),
        _tool("left-pad", str(without_bin)),
        _tool("remote-lib"),
        _tool("remote-cli"),
        _tool("offline"),  # registry unreachable
    ]
    evidence = await NpmAdapter(runner, home_config).orphan_evidence(records)
    assert evidence.executables == {
        "tldr": True,
        "left-pad": False,
        "remote-lib": False,
        "remote-cli": True,
        "offline": None,
    }
    assert evidence.required_by == frozenset()
    assert ("npm", "view", "tldr", "bin", "--json") not in runner.calls


# --- pip ---------------------------------------------------------------------


def test_parse_pip_list():
    assert parse_pip_list(PIP_LIST) == [
        ("requests", "2.31.0"),
        ("black", "24.1.0"),
        ("httpx", "0.27.0"),
    ]
    with pytest.raises(IntrospectionParseFailure):
        parse_pip_list('{"not": "a list"}')


def test_parse_required_by():
    required = parse_required_by(PIP_SHOW)
    # requests: has Required-by and is listed under httpx's Requires
    assert "requests" in required
    assert {"certifi", "idna", "urllib3", "click", "anyio"} <= required
    assert "black" not in required
    assert "httpx" not in required


def test_parse_show_reports_covered_packages():
    required, shown = parse_show(PIP_SHOW)
    assert shown == frozenset({"requests", "black", "httpx"})
    assert required == parse_required_by(PIP_SHOW)


def test_parse_required_by_garbage():
    with pytest.raises(IntrospectionParseFailure):
        parse_required_by("Traceback (most recent call last):\n  boom")
    assert parse_required_by("") == frozenset()


@pytest.mark.asyncio
async def test_pip_falls_back_to_pip3(fake_runner, home_config):
    runner = fake_runner(
        {("pip3", "list", "--format=json"): PIP_LIST, ("pip3", "show"): PIP_SHOW},
        missing={"pip"},
    )
    adapter = PipAdapter(runner, home_config)
    raws = await adapter.list_packages()
    assert [r.full_name for r in raws] == ["requests", "black", "httpx"]
    assert all(r.size_bytes == 0 for r in raws)
    records = [ToolRecord(name=r.full_name, full_name=r.full_name, source=ToolSource.PIP) for r in raws]
    evidence = await adapter.orphan_evidence(records)
    assert "requests" in evidence.required_by
    assert runner.calls[-1][:3] == ("pip3", "show", "--no-color")
    assert runner.calls[-1][3:] == ("requests", "black", "httpx")


@pytest.mark.asyncio
async def test_pip_first_command_failing_tries_next(fake_runner, home_config):
    runner = fake_runner({("pip3", "list", "--format=json"): PIP_LIST})
    raws = await PipAdapter(runner, home_config).list_packages()
    assert len(raws) == 3
    assert runner.calls[0][0] == "pip"


@pytest.mark.asyncio
async def test_pip_missing_everywhere(fake_runner, home_config):
    adapter = PipAdapter(fake_runner(missing={"pip", "pip3"}), home_config)
    with pytest.raises(SourceUnavailable):
        await adapter.list_packages()


@pytest.mark.asyncio
async def test_pip_bulk_show_failure_raises(fake_runner, home_config):
    runner = fake_runner({("pip", "list", "--format=json"): PIP_LIST, ("pip", "show"): ""})
    adapter = PipAdapter(runner, home_config)
    await adapter.list_packages()
    records = [ToolRecord(name="requests", full_name="requests", source=ToolSource.PIP)]
    with pytest.raises(IntrospectionParseFailure):
        await adapter.reverse_dependencies(records)


@pytest.mark.asyncio
async def test_pip_no_records_no_show_call(fake_runner, home_config):
    runner = fake_runner()
    assert await PipAdapter(runner, home_config).reverse_dependencies([]) == frozenset()
    assert runner.calls == []


# --- cargo -------------------------------------------------------------------

CRATES_TOML = """
[v1]
"ripgrep 14.1.0 (registry+https://github.com/rust-lang/crates.io-index)" = ["rg"]
"cargo-edit 0.12.2 (registry+https://github.com/rust-lang/crates.io-index)" = ["cargo-add", "cargo-rm"]
"""


def test_parse_crates_toml():
    assert parse_crates_toml(CRATES_TOML) == [
        ("ripgrep", "14.1.0", ["rg"]),
        ("cargo-edit", "0.12.2", ["cargo-add", "cargo-rm"]),
    ]
    with pytest.raises(IntrospectionParseFailure):
        parse_crates_toml("[v1\nbroken")


def test_parse_install_list():
    text = "ripgrep v14.1.0:\n    rg\nbat v0.24.0:\n    bat\n"
    assert parse_install_list(text) == [("ripgrep", "14.1.0", ["rg"]), ("bat", "0.24.0", ["bat"])]


@pytest.mark.asyncio
async def test_cargo_reads_crates_toml(fake_runner, home_config):
    cargo = home_config.home / ".cargo"
    (cargo / "bin").mkdir(parents=True)
    (cargo / ".crates.toml").write_text(CRATES_TOML)
    (cargo / "bin" / "rg").write_bytes(b"x" * 300)
    (cargo / "bin" / "cargo-add").write_bytes(b"x" * 20)
    (cargo / "bin" / "cargo-rm").write_bytes(b"x" * 22)
    runner = fake_runner(missing={"cargo"})
    raws = await CargoAdapter(runner, home_config).list_packages()
    assert [(r.full_name, r.version, r.size_bytes) for r in raws] == [
        ("ripgrep", "14.1.0", 300),
        ("cargo-edit", "0.12.2", 42),
    ]
    assert raws[0].install_path == str(cargo / "bin")
    assert runner.calls == []


@pytest.mark.asyncio
async def test_cargo_respects_cargo_home(tmp_path, fake_runner, home_config, monkeypatch):
    custom = tmp_path / "elsewhere"
    custom.mkdir()
    (custom / ".crates.toml").write_text(CRATES_TOML)
    monkeypatch.setenv("CARGO_HOME", str(custom))
    raws = await CargoAdapter(fake_runner(), home_config).list_packages()
    assert [r.full_name for r in raws] == ["ripgrep", "cargo-edit"]
    assert raws[0].size_bytes == 0  # binaries absent


@pytest.mark.asyncio
async def test_cargo_falls_back_to_install_list(fake_runner, home_config):
    runner = fake_runner({("cargo", "install", "--list"): "bat v0.24.0:\n    bat\n"})
    raws = await CargoAdapter(runner, home_config).list_packages()
    assert [(r.full_name, r.version) for r in raws] == [("bat", "0.24.0")]


@pytest.mark.asyncio
async def test_cargo_not_installed(fake_runner, home_config):
    adapter = CargoAdapter(fake_runner(missing={"cargo"}), home_config)
    with pytest.raises(SourceUnavailable):
        await adapter.list_packages()


# --- go ----------------------------------------------------------------------

GO_VERSION_M = (
    "/home/u/go/bin/gopls: go1.22.0\n"
    "\tpath\tgolang.org/x/tools/gopls\n"
    "\tmod\tgolang.org/x/tools/gopls\tv0.15.1\th1:abc=\n"
    "\tdep\tgolang.org/x/mod\tv0.15.0\th1:def=\n"
)


def test_parse_build_info():
    assert parse_build_info(GO_VERSION_M) == ("golang.org/x/tools/gopls", "v0.15.1")
    assert parse_build_info("garbage") == (None, None)
    assert parse_build_info("\tmod\texample.com/x\t(devel)\t\n") == ("example.com/x", None)


@pytest.mark.asyncio
async def test_go_lists_gobin(tmp_path, fake_runner, home_config):
    gobin = tmp_path / "gobin"
    gobin.mkdir()
    (gobin / "gopls").write_bytes(b"x" * 77)
    (gobin / "hey").write_bytes(b"x" * 5)
    (gobin / ".hidden").write_bytes(b"x")
    runner = fake_runner({
        ("go", "env", "GOBIN"): f"{gobin}\n",
        ("go", "version", "-m", str(gobin / "gopls")): GO_VERSION_M,
    })
    raws = await GoAdapter(runner, home_config).list_packages()
    assert [(r.full_name, r.version, r.size_bytes) for r in raws] == [
        ("gopls", "v0.15.1", 77),
        ("hey", None, 5),
    ]
    assert raws[0].description == "golang.org/x/tools/gopls"


@pytest.mark.asyncio
async def test_go_uses_gopath_bin(tmp_path, fake_runner, home_config):
    gopath = tmp_path / "gopath"
    (gopath / "bin").mkdir(parents=True)
    (gopath / "bin" / "dlv").write_bytes(b"x")
    runner = fake_runner({("go", "env", "GOBIN"): "\n", ("go", "env", "GOPATH"): str(gopath)})
    raws = await GoAdapter(runner, home_config).list_packages()
    assert [r.full_name for r in raws] == ["dlv"]


# --- registry ----------------------------------------------------------------


def test_build_adapters_closed_set(fake_runner, home_config):
    adapters = build_adapters(home_config, fake_runner())
    assert set(adapters) == set(ADAPTER_TYPES) == {
        ToolSource.NPM, ToolSource.CARGO, ToolSource.PIP, ToolSource.GO,
    }
    assert [s for s, a in adapters.items() if a.supports_orphans] == [ToolSource.NPM, ToolSource.PIP]


@pytest.mark.asyncio
async def test_go_binary_vanishing_mid_scan_keeps_source(tmp_path, fake_runner, home_config):
    gobin = tmp_path / "gobin"
    gobin.mkdir()
    (gobin / "gopls").write_bytes(b"x" * 77)
    (gobin / "vanish").write_bytes(b"x" * 9)

    class RemovingRunner(fake_runner):
        async def run(self, name, *args, check=True):
            if args[:2] == ("version", "-m") and args[2].endswith("vanish"):
                Path(args[2]).unlink()
            return await super().run(name, *args, check=check)

    runner = RemovingRunner({("go", "env", "GOBIN"): str(gobin), ("go", "version", "-m"): GO_VERSION_M})
    raws = await GoAdapter(runner, home_config).list_packages()
    assert [(r.full_name, r.size_bytes) for r in raws] == [("gopls", 77), ("vanish", 0)]
    assert raws[1].installed_at is None


@pytest.mark.asyncio
async def test_cargo_unstatable_binary_counts_zero(fake_runner, home_config, monkeypatch):
    cargo = home_config.home / ".cargo"
    (cargo / "bin").mkdir(parents=True)
    (cargo / ".crates.toml").write_text(CRATES_TOML)
    (cargo / "bin" / "cargo-add").write_bytes(b"x" * 20)
    # rg passes the existence check but is gone by the time it is measured
    monkeypatch.setattr(Path, "is_file", lambda self: True)
    raws = await CargoAdapter(fake_runner(), home_config).list_packages()
    assert [(r.full_name, r.size_bytes) for r in raws] == [("ripgrep", 0), ("cargo-edit", 20)]
