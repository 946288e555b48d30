"""
Command-Line Interface for the Semaphore signaling toolkit

Provides commands for proof encoding, calldata sanity checks, scope
derivation and an in-memory end-to-end demonstration.
"""

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from semaphore_toolkit import __version__, print_disclaimer
from semaphore_toolkit.encoding import (
    EncodingError,
    ProofEncoder,
    SemaphoreProof,
    load_verification_key,
    validate_length,
)
from semaphore_toolkit.encoding.factory import build_strategies
from semaphore_toolkit.protocol import (
    Deployment,
    DeploymentConfig,
    GroupIndexer,
    SemaphoreError,
    compute_scope,
    hash_for_circuit,
)
from semaphore_toolkit.protocol.adapters import MockVerifier
from semaphore_toolkit.protocol.config import DEFAULT_TREE_DEPTH
from semaphore_toolkit.protocol.scope import to_int


def _load_config(config_path):
    if config_path:
        return DeploymentConfig.from_yaml(config_path)
    return DeploymentConfig.from_env()


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', is_flag=True, help='Enable verbose logging')
@click.option(
    '--config',
    'config_path',
    type=click.Path(exists=True, dir_okay=False),
    help='YAML deployment config (default: SEMAPHORE_* environment variables)'
)
@click.pass_context
def main(ctx, verbose, config_path):
    """
    Semaphore signaling toolkit

    Anonymous group membership, nullifier-based anti-replay, and proof
    encoding for on-chain Groth16 verifiers.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = _load_config(config_path)
    except SemaphoreError as e:
        raise click.UsageError(str(e))


@main.command()
@click.argument('proof_path', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--vk',
    'vk_path',
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help='Verification key JSON (depth-specific or combined per-depth file)'
)
@click.option('--depth', type=int, default=None, help='Tree depth (default: from proof)')
@click.option('--output', type=click.Path(), help='Write calldata JSON array here')
@click.option(
    '--strategies',
    type=str,
    default=None,
    help='Comma-separated strategy order (native, external, manual)'
)
@click.option('--timeout', type=float, default=None, help='External encoder timeout in seconds')
@click.pass_context
def encode(ctx, proof_path, vk_path, depth, output, strategies, timeout):
    """
    Encode a Semaphore proof as verifier calldata.

    Examples:

        # Encode with the default strategy cascade
        semaphore-toolkit encode proof.json --vk verification-keys.json

        # Only use the external garaga CLI, 60 second timeout
        semaphore-toolkit encode proof.json --vk vk.json --strategies external --timeout 60
    """
    config = ctx.obj["config"]
    try:
        if timeout is not None:
            config = replace(config, encoder_timeout=timeout)
        proof = SemaphoreProof.from_json(proof_path)
        vk = load_verification_key(vk_path, depth or proof.merkle_tree_depth)
        encoder = ProofEncoder(build_strategies(config, prefer=strategies), config)
        encoded = encoder.encode(proof, vk)
    except (EncodingError, SemaphoreError, ValueError) as e:
        click.echo(click.style(f"✗ Error: {e}", fg="red"), err=True)
        sys.exit(1)

    if encoded.diagnostic:
        click.echo(click.style(
            "⚠ No encoder available; payload is diagnostic only (ENCODING_PENDING)",
            fg="yellow"
        ))
    else:
        click.echo(click.style(
            f"✓ Encoded with {encoded.strategy}: {len(encoded)} values", fg="green"
        ))

    if output:
        Path(output).write_text(encoded.to_json(), encoding="utf-8")
        click.echo(f"Calldata written to {output}")
    elif not encoded.diagnostic:
        click.echo(encoded.to_json())


@main.command('check-length')
@click.argument('calldata_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--depth', type=int, default=DEFAULT_TREE_DEPTH, help='Tree depth of the verifier')
@click.pass_context
def check_length(ctx, calldata_path, depth):
    """Check that a calldata JSON array has a plausible length."""
    config = ctx.obj["config"]
    try:
        calldata = json.loads(Path(calldata_path).read_text(encoding="utf-8"))
        if not isinstance(calldata, list):
            raise ValueError("calldata file must hold a JSON array")
        validate_length(calldata, config.curve, config.proof_system, depth)
    except (EncodingError, ValueError) as e:
        click.echo(click.style(f"✗ {e}", fg="red"), err=True)
        sys.exit(1)
    click.echo(click.style(f"✓ {len(calldata)} values, within expected range", fg="green"))


@main.command()
@click.argument('contract_address')
@click.argument('domain_separator')
def scope(contract_address, domain_separator):
    """Derive a production scope from a contract address and domain string."""
    try:
        value = compute_scope(contract_address, domain_separator)
    except (TypeError, ValueError) as e:
        raise click.BadParameter(str(e))
    click.echo(str(value))


@main.command('hash-signal')
@click.argument('value')
def hash_signal(value):
    """Reduce a message or scope value the way the circuit does."""
    try:
        click.echo(str(hash_for_circuit(to_int(value))))
    except (TypeError, ValueError) as e:
        raise click.BadParameter(str(e))


@main.command()
@click.pass_context
def demo(ctx):
    """
    Run an end-to-end signaling scenario in memory.

    Uses a mock verifier that reads public outputs from the input, so no
    proving system is needed.
    """
    config = ctx.obj["config"]
    deployment = Deployment(MockVerifier(), config)
    admin = "0xadmin"
    group_id = 1

    click.echo("\n" + "=" * 70)
    click.echo(click.style("Semaphore Signaling Demo", fg="cyan", bold=True))
    click.echo("=" * 70)

    deployment.registry.create(group_id, caller=admin)
    deployment.registry.add_member(group_id, 0xC1, 0xAAA, caller=admin)
    deployment.registry.add_member(group_id, 0xC2, 0xBBB, caller=admin)
    click.echo(
        f"Group {group_id}: {deployment.registry.member_count(group_id)} members, "
        f"root {deployment.registry.current_root(group_id):#x}"
    )

    attempts = [
        ("signal under previous root", [0xAAA, 0xCAFE, 0x1234, 0x42]),
        ("replay of the same signal", [0xAAA, 0xCAFE, 0x1234, 0x42]),
        ("signal under unknown root", [0xBADBAD, 0xBEEF, 0x1234, 0x42]),
    ]
    for label, calldata in attempts:
        try:
            deployment.signals.send_signal(group_id, [str(v) for v in calldata])
            click.echo(click.style(f"✓ {label}: accepted", fg="green"))
        except SemaphoreError as e:
            click.echo(click.style(f"✗ {label}: {type(e).__name__}", fg="yellow"))

    indexer = GroupIndexer.from_events(deployment.events.events())
    group = indexer.groups[group_id]
    click.echo(
        f"\nIndexed from {len(deployment.events)} events: "
        f"{len(group.active_members)} members, {len(group.signals)} signals"
    )


@main.command()
def version():
    """Show version and disclaimer information."""
    click.echo(f"\nSemaphore signaling toolkit v{__version__}\n")
    print_disclaimer()


if __name__ == '__main__':
    main()
