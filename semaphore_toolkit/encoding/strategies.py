"""
Encoding strategies.

Each strategy turns a validated proof and verification key into verifier
input. All of them build public inputs from ``SemaphoreProof``, so message
and scope are reduced with the same hash everywhere.
"""

from __future__ import annotations

import importlib
import json
import logging
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from ..protocol.config import DeploymentConfig
from .constants import (
    CURVE_IDS,
    DEFAULT_NATIVE_TARGET,
    ENCODING_PENDING,
    GARAGA_VERSION,
    PROOF_FILE,
    PUBLIC_FILE,
    VK_FILE,
)
from .errors import EncoderTimeoutError, StrategyFailedError
from .proof import SemaphoreProof, VerificationKey
from .types import EncodedInput, normalize_felts

logger = logging.getLogger(__name__)

NativeEncodeFn = Callable[[dict, dict, int], Sequence[Any]]


class EncodingStrategy(ABC):
    """One way of producing verifier input."""

    name: str = ""

    @classmethod
    def from_config(cls, config: DeploymentConfig) -> "EncodingStrategy":
        return cls()

    @abstractmethod
    def encode(self, proof: SemaphoreProof, vk: VerificationKey) -> EncodedInput:
        """
        Encode ``proof`` for the verifier.

        Raises:
            StrategyFailedError: If this strategy cannot produce input
        """


class NativeEncoder(EncodingStrategy):
    """In-process encoder loaded from an optional extension module."""

    name = "native"

    def __init__(
        self,
        encode_fn: Optional[NativeEncodeFn] = None,
        target: str = DEFAULT_NATIVE_TARGET,
        curve: str = "bn254",
    ) -> None:
        self._encode_fn = encode_fn
        self._target = target
        self._curve = curve

    @classmethod
    def from_config(cls, config: DeploymentConfig) -> "NativeEncoder":
        return cls(curve=config.curve)

    def encode(self, proof: SemaphoreProof, vk: VerificationKey) -> EncodedInput:
        encode_fn = self._encode_fn or _load_native(self._target)
        curve_id = CURVE_IDS.get(self._curve)
        if curve_id is None:
            raise StrategyFailedError(f"no curve id for {self._curve!r}")
        try:
            raw = encode_fn(proof.to_garaga(), vk.to_garaga(), curve_id)
        except StrategyFailedError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise StrategyFailedError(f"native encoder failed: {exc}") from exc
        return EncodedInput(values=normalize_felts(raw, self.name), strategy=self.name)


class ExternalProcessEncoder(EncodingStrategy):
    """Runs ``garaga calldata`` on files in a temporary directory."""

    name = "external"

    def __init__(
        self,
        command: Sequence[str] = ("garaga",),
        timeout: float = 120.0,
    ) -> None:
        if not command:
            raise ValueError("command must not be empty")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._command = tuple(command)
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: DeploymentConfig) -> "ExternalProcessEncoder":
        return cls(command=config.garaga_command, timeout=config.encoder_timeout)

    def encode(self, proof: SemaphoreProof, vk: VerificationKey) -> EncodedInput:
        with tempfile.TemporaryDirectory(prefix="semaphore-garaga-") as tmp_dir:
            proof_path, public_path, vk_path = write_export_files(
                Path(tmp_dir), proof, vk
            )
            command = [
                *self._command,
                "calldata",
                "--system",
                "groth16",
                "--vk",
                str(vk_path),
                "--proof",
                str(proof_path),
                "--public-inputs",
                str(public_path),
                "--format",
                "array",
            ]
            try:
                result = subprocess.run(
                    command,
                    capture_output=True,
                    text=True,
                    check=False,
                    timeout=self._timeout,
                )
            except subprocess.TimeoutExpired as exc:
                raise EncoderTimeoutError(
                    f"external encoder timed out after {self._timeout}s"
                ) from exc
            except OSError as exc:
                raise StrategyFailedError(f"cannot run external encoder: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.strip() or "unknown encoder error"
            raise StrategyFailedError(f"external encoder failed: {stderr}")
        try:
            raw = json.loads(result.stdout.strip())
        except json.JSONDecodeError as exc:
            raise StrategyFailedError("external encoder output is not a JSON array") from exc
        return EncodedInput(values=normalize_felts(raw, self.name), strategy=self.name)


class ManualExportEncoder(EncodingStrategy):
    """
    Last resort that never raises.

    Returns a diagnostic payload tagged with ENCODING_PENDING followed by
    the public signals, the snarkjs proof and the verification key, and
    optionally writes the three JSON files for offline encoding.
    """

    name = "manual"

    def __init__(self, export_dir: Optional[Path | str] = None) -> None:
        self._export_dir = Path(export_dir) if export_dir is not None else None

    def encode(self, proof: SemaphoreProof, vk: VerificationKey) -> EncodedInput:
        location = "<export dir>"
        if self._export_dir is not None:
            try:
                self._export_dir.mkdir(parents=True, exist_ok=True)
                write_export_files(self._export_dir, proof, vk)
                location = str(self._export_dir)
            except OSError as exc:
                logger.warning("Could not write manual export files: %s", exc)

        logger.warning(
            "Native and external encoders unavailable (calldata format: garaga %s).",
            GARAGA_VERSION,
        )
        logger.warning("Proof and public signals exported for manual encoding.")
        logger.warning(
            "Run: garaga calldata --system groth16 --vk %s/%s --proof %s/%s "
            "--public-inputs %s/%s --format array",
            location,
            VK_FILE,
            location,
            PROOF_FILE,
            location,
            PUBLIC_FILE,
        )

        values = (
            ENCODING_PENDING,
            *(str(v) for v in proof.public_signals()),
            json.dumps(proof.to_snarkjs()),
            json.dumps(vk.to_snarkjs()),
        )
        return EncodedInput(values=values, strategy=self.name, diagnostic=True)


def write_export_files(
    directory: Path, proof: SemaphoreProof, vk: VerificationKey
) -> tuple[Path, Path, Path]:
    proof_path = directory / PROOF_FILE
    public_path = directory / PUBLIC_FILE
    vk_path = directory / VK_FILE
    proof_path.write_text(json.dumps(proof.to_snarkjs(), indent=2), encoding="utf-8")
    public_path.write_text(
        json.dumps([str(v) for v in proof.public_signals()], indent=2), encoding="utf-8"
    )
    vk_path.write_text(json.dumps(vk.to_snarkjs(), indent=2), encoding="utf-8")
    return proof_path, public_path, vk_path


def _load_native(target: str) -> NativeEncodeFn:
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise StrategyFailedError(f"invalid native encoder target: {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise StrategyFailedError(
            f"native encoder module {module_name!r} is not installed"
        ) from exc
    encode_fn = getattr(module, attribute, None)
    if not callable(encode_fn):
        raise StrategyFailedError(f"{target!r} is not callable")
    return encode_fn
