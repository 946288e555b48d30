"""
Tests for the command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

from semaphore_toolkit import __version__
from semaphore_toolkit.cli import main
from semaphore_toolkit.encoding import feature_flags
from semaphore_toolkit.protocol.scope import compute_scope, hash_for_circuit

CONTRACT = "0x0002e2b414c453ee2c862d8f9d06fac9817dfff8afe2bde8ba60ddb75585a37b"

PROOF = {
    "merkleTreeDepth": 20,
    "merkleTreeRoot": "123",
    "nullifier": "456",
    "message": "1",
    "scope": "2",
    "points": [str(i) for i in range(1, 9)],
}

VK = {
    "nPublic": 4,
    "vk_alpha_1": ["1", "2", "1"],
    "vk_beta_2": [["1", "2"], ["3", "4"], ["1", "0"]],
    "vk_gamma_2": [["1", "2"], ["3", "4"], ["1", "0"]],
    "vk_delta_2": [["1", "2"], ["3", "4"], ["1", "0"]],
    "IC": [["1", "2", "1"] for _ in range(5)],
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SEMAPHORE_ROOT_HISTORY_SIZE",
        "SEMAPHORE_ENCODER_TIMEOUT",
        "SEMAPHORE_ENCODER_STRATEGIES",
        "SEMAPHORE_GARAGA_COMMAND",
        "SEMAPHORE_TREE_DEPTH",
        "SEMAPHORE_CURVE",
        "SEMAPHORE_PROOF_SYSTEM",
    ):
        monkeypatch.delenv(name, raising=False)
    feature_flags.set_encoder_strategies(None)
    yield
    feature_flags.set_encoder_strategies(None)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def proof_files(tmp_path):
    proof_path = tmp_path / "proof.json"
    vk_path = tmp_path / "vk.json"
    proof_path.write_text(json.dumps(PROOF), encoding="utf-8")
    vk_path.write_text(json.dumps(VK), encoding="utf-8")
    return proof_path, vk_path


def test_help(runner):
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    for command in ("encode", "check-length", "scope", "hash-signal", "demo"):
        assert command in result.output


def test_version(runner):
    result = runner.invoke(main, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output
    assert "trust anchor" in result.output


def test_scope(runner):
    result = runner.invoke(main, ["scope", CONTRACT, "anonymous-voting-v1"])
    assert result.exit_code == 0
    assert result.output.strip() == str(compute_scope(CONTRACT, "anonymous-voting-v1"))


def test_scope_rejects_empty_domain(runner):
    result = runner.invoke(main, ["scope", CONTRACT, ""])
    assert result.exit_code != 0


def test_hash_signal(runner):
    result = runner.invoke(main, ["hash-signal", "0x2a"])
    assert result.exit_code == 0
    assert result.output.strip() == str(hash_for_circuit(42))


def test_hash_signal_rejects_garbage(runner):
    result = runner.invoke(main, ["hash-signal", "forty-two"])
    assert result.exit_code != 0


def test_encode_manual_fallback(runner, proof_files, tmp_path):
    proof_path, vk_path = proof_files
    output = tmp_path / "calldata.json"
    result = runner.invoke(
        main,
        ["encode", str(proof_path), "--vk", str(vk_path), "--strategies", "manual",
         "--output", str(output)],
    )
    assert result.exit_code == 0, result.output
    assert "ENCODING_PENDING" in result.output
    payload = json.loads(output.read_text())
    assert payload[0] == "ENCODING_PENDING"
    assert payload[1:3] == ["123", "456"]


def test_encode_external(runner, proof_files, monkeypatch):
    import subprocess

    from semaphore_toolkit.encoding import strategies

    def fake_run(command, **kwargs):
        return subprocess.CompletedProcess(
            command, 0, stdout=json.dumps([1977] + [5] * 1977), stderr=""
        )

    monkeypatch.setattr(strategies.subprocess, "run", fake_run)
    proof_path, vk_path = proof_files
    result = runner.invoke(
        main,
        ["encode", str(proof_path), "--vk", str(vk_path), "--strategies", "external",
         "--timeout", "5"],
    )
    assert result.exit_code == 0, result.output
    assert "Encoded with external: 1977 values" in result.output


def test_encode_all_strategies_fail(runner, proof_files, monkeypatch):
    from semaphore_toolkit.encoding import strategies
    from semaphore_toolkit.encoding.errors import StrategyFailedError

    def missing(target):
        raise StrategyFailedError(f"{target} is not installed")

    monkeypatch.setattr(strategies, "_load_native", missing)
    proof_path, vk_path = proof_files
    result = runner.invoke(
        main, ["encode", str(proof_path), "--vk", str(vk_path), "--strategies", "native"]
    )
    assert result.exit_code == 1


def test_encode_invalid_strategy_name(runner, proof_files):
    proof_path, vk_path = proof_files
    result = runner.invoke(
        main, ["encode", str(proof_path), "--vk", str(vk_path), "--strategies", "rust"]
    )
    assert result.exit_code == 1
    assert "Invalid encoder strategy" in result.output


def test_encode_invalid_proof(runner, proof_files, tmp_path):
    _, vk_path = proof_files
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"merkleTreeDepth": 20}), encoding="utf-8")
    result = runner.invoke(main, ["encode", str(bad), "--vk", str(vk_path)])
    assert result.exit_code == 1
    assert "missing fields" in result.output


def test_check_length(runner, tmp_path):
    good = tmp_path / "good.json"
    good.write_text(json.dumps(["0"] * 1977), encoding="utf-8")
    short = tmp_path / "short.json"
    short.write_text(json.dumps(["0"] * 5), encoding="utf-8")

    assert runner.invoke(main, ["check-length", str(good)]).exit_code == 0
    result = runner.invoke(main, ["check-length", str(short)])
    assert result.exit_code == 1
    assert "outside expected range" in result.output


def test_demo(runner):
    result = runner.invoke(main, ["demo"])
    assert result.exit_code == 0, result.output
    assert "signal under previous root: accepted" in result.output
    assert "replay of the same signal: NullifierReusedError" in result.output
    assert "signal under unknown root: RootMismatchError" in result.output
    assert "2 members, 1 signals" in result.output


def test_config_file(runner, tmp_path):
    config = tmp_path / "deployment.yaml"
    config.write_text("root_history_size: 1\n", encoding="utf-8")
    result = runner.invoke(main, ["--config", str(config), "demo"])
    assert result.exit_code == 0, result.output
    # with a single slot the previous root is already evicted
    assert "signal under previous root: RootMismatchError" in result.output


def test_bad_config_file(runner, tmp_path):
    config = tmp_path / "deployment.yaml"
    config.write_text("unknown_key: 1\n", encoding="utf-8")
    result = runner.invoke(main, ["--config", str(config), "demo"])
    assert result.exit_code != 0
    assert "Unknown configuration keys" in result.output
