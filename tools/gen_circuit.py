import random
from pathlib import Path

from r1cs_core import Constraint, R1cs, write_r1cs

BN128_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

def random_lc(rng: random.Random, n_vars: int, max_terms: int) -> dict:
    k = rng.randint(0, min(max_terms, n_vars))
    return {w: rng.randrange(1, BN128_PRIME) for w in rng.sample(range(n_vars), k)}

def generate_circuit(out_file: str, n_vars: int, n_constraints: int, seed: int = 0, max_terms: int = 4) -> Path:
    rng = random.Random(seed)
    n_outputs = 1 if n_vars > 1 else 0
    n_pub = min(2, max(0, n_vars - 1 - n_outputs))
    constraints = [
        Constraint(
            random_lc(rng, n_vars, max_terms),
            random_lc(rng, n_vars, max_terms),
            random_lc(rng, n_vars, max_terms),
        )
        for _ in range(n_constraints)
    ]
    # Wire 0 is the constant one; labels are strictly increasing.
    labels = sorted(rng.sample(range(1, 10 * n_vars + 1), n_vars - 1)) if n_vars > 1 else []
    wire_map = [0] + labels if n_vars > 0 else []

    r1cs = R1cs.build(
        prime=BN128_PRIME,
        n_vars=n_vars,
        n_outputs=n_outputs,
        n_pub_inputs=n_pub,
        n_prv_inputs=max(0, n_vars - 1 - n_outputs - n_pub),
        n_labels=10 * n_vars,
        constraints=constraints,
        map=wire_map,
    )

    out = Path(out_file)
    out.parent.mkdir(parents=True, exist_ok=True)
    write_r1cs(out, r1cs)
    print(f"GENERATED: {out}")
    return out

if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/gen_circuit.py OUT_FILE [--vars N] [--constraints M] [--seed S]

    args = [a for a in sys.argv[1:] if a]

    def pop_option(arg_list: list[str], name: str, default: int) -> tuple[int, list[str]]:
        """Remove an integer option from an argv-style list."""
        if name not in arg_list:
            return default, arg_list
        i = arg_list.index(name)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{name} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    n_vars, args = pop_option(args, "--vars", 16)
    n_constraints, args = pop_option(args, "--constraints", 32)
    seed, args = pop_option(args, "--seed", 0)

    out = args[0] if len(args) > 0 else "circuit.r1cs"
    generate_circuit(out, n_vars, n_constraints, seed=seed)
