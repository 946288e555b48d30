"""
Semaphore signaling toolkit.

Anonymous group signaling: membership roots, root history, global
nullifiers, two-step admin transfer, and proof encoding for on-chain
verifiers.
"""

__version__ = "0.1.0"


def print_disclaimer() -> None:
    """Print the toolkit's security disclaimer."""
    print("⚠️  The verifier is the trust anchor of every deployment.")
    print("    Proof soundness is delegated to it; this toolkit only checks")
    print("    roots, nullifiers and encoding sanity.")
    print("    Use compute_scope() for production scopes, never small integers.")
