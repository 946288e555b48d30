"""Proof and verification-key documents used across encoding tests."""


def make_proof(depth: int = 20) -> dict:
    return {
        "merkleTreeDepth": depth,
        "merkleTreeRoot": "4990292586352433503726012711155167179034286198473030768981544541070532815155",
        "nullifier": "17540473064543782218297133630279824063352907908315494138425986188962403570231",
        "message": "32745724963520510550185023804391900974863477733501474067656557556163468591104",
        "scope": "32745724963520459352266000005497889155542880745006094006713916467185706237952",
        "points": [str(i) for i in range(11, 19)],
    }


def _g1(seed: int) -> list:
    return [str(seed), str(seed + 1), "1"]


def _g2(seed: int) -> list:
    return [[str(seed), str(seed + 1)], [str(seed + 2), str(seed + 3)], ["1", "0"]]


def make_vk() -> dict:
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": 4,
        "vk_alpha_1": _g1(100),
        "vk_beta_2": _g2(200),
        "vk_gamma_2": _g2(300),
        "vk_delta_2": _g2(400),
        "IC": [_g1(500 + 10 * i) for i in range(5)],
    }


def make_combined_vks(depths: int = 3) -> dict:
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": 4,
        "vk_alpha_1": _g1(100),
        "vk_beta_2": _g2(200),
        "vk_gamma_2": _g2(300),
        "vk_delta_2": [_g2(1000 * d) for d in range(1, depths + 1)],
        "IC": [[_g1(1000 * d + i) for i in range(5)] for d in range(1, depths + 1)],
    }
