#!/usr/bin/env python3
"""
Generate benchmark crawl corpora of different sizes.
Each line is a synthetic '(document_id, text)' crawl record.
"""

import sys
import random
import argparse
from pathlib import Path

# Configuration
SHARED_DIR = Path("shared")
INPUT_DIR = SHARED_DIR / "input"

# Target sizes (approximate)
TARGETS = [
    ("crawl_small", 64 * 1024),            # ~64KB
    ("crawl_medium", 1 * 1024 * 1024),     # ~1MB
    ("crawl_large", 10 * 1024 * 1024),     # ~10MB
]

VOCABULARY = (
    "map reduce shuffle partition index search engine query document word "
    "token crawl spark hadoop cluster worker coordinator there's it's can't "
    "data stream batch record count rank sort group filter stop number "
    "apache scala python java server client network storage cache memory "
    "latency throughput job task stage phase combiner reducer mapper output"
).split()
FILLER = "the a of and to in is that for on with as by at from".split()


def generate_document(rng: random.Random, doc_num: int, words_per_doc: int) -> str:
    """One crawl line with a Zipf-like mix of vocabulary, stop words and numbers"""
    words = []
    for _ in range(words_per_doc):
        roll = rng.random()
        if roll < 0.3:
            words.append(rng.choice(FILLER))
        elif roll < 0.35:
            words.append(str(rng.randint(0, 9999)))
        else:
            # Low ranks are drawn far more often than high ones
            rank = min(int(rng.paretovariate(1.2)) - 1, len(VOCABULARY) - 1)
            word = VOCABULARY[rank]
            words.append(word.capitalize() if rng.random() < 0.1 else word)
    text = " ".join(words)
    return f"(doc-{doc_num:07d}, {text}.)\n"


def generate_file(output_path: Path, target_size: int, seed: int = 0, words_per_doc: int = 60):
    """
    Generate a crawl file of roughly target_size bytes.

    Args:
        output_path: Path where the output file should be written
        target_size: Target file size in bytes
        seed: Random seed, so the same arguments give the same corpus
        words_per_doc: Words per synthetic document
    """
    print(f"Generating {output_path.name} (target: {target_size / (1024*1024):.2f} MB)...")
    rng = random.Random(seed)
    written = 0
    doc_num = 0

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        while written < target_size:
            line = generate_document(rng, doc_num, words_per_doc)
            f.write(line)
            written += len(line.encode('utf-8'))
            doc_num += 1

    actual_size = output_path.stat().st_size
    print(f"  ✓ Created: {output_path.name} ({actual_size / (1024*1024):.2f} MB, {doc_num} documents)")
    return actual_size


def main(argv=None):
    """Generate all benchmark input files."""
    parser = argparse.ArgumentParser(description="Generate synthetic crawl corpora")
    parser.add_argument('--output-dir', default=str(INPUT_DIR), help=f'Directory for corpora (default: {INPUT_DIR})')
    parser.add_argument('--seed', type=int, default=0, help='Random seed (default: 0)')
    args = parser.parse_args(argv)

    output_dir = Path(args.output_dir)
    print("=" * 70)
    print("Generating Benchmark Crawl Corpora")
    print("=" * 70)

    total_size = 0
    for name, target_size in TARGETS:
        # One part file per corpus directory, like crawl output
        output_path = output_dir / name / "part-00000"
        if output_path.exists():
            existing_size = output_path.stat().st_size
            if abs(existing_size - target_size) < target_size * 0.1:  # Within 10%
                print(f"  ⏭️  Skipping {name} (already exists, size: {existing_size / (1024*1024):.2f} MB)")
                total_size += existing_size
                continue
        total_size += generate_file(output_path, target_size, seed=args.seed)

    print("\n" + "=" * 70)
    print(f"✓ Generation complete!")
    print(f"  Total size: {total_size / (1024*1024):.2f} MB")
    print(f"  Corpora in: {output_dir}")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
