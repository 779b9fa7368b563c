"""Measure tokenize_batch() and detokenize_batch() throughput of a saved model.

Text comes from a local UTF-8 file (one document per line) or, by default,
from a slice of the Sci-Fi Gutenberg dataset (requires the ``bench`` extra).

Outputs one table row:
  Corpus Size | Vocab Size | Merge Rules | Encoding Throughput |
  Decoding Throughput | Chars per Token | Unknown Rate
"""

import argparse
import logging
import time
from pathlib import Path

from mergetok import Tokenizer

HF_DATASET = "stevez80/Sci-Fi-Books-gutenberg"


def load_corpus(text_file: Path | None, num_docs: int | None) -> list[str]:
    """Load up to `num_docs` documents from `text_file` or the HF dataset."""
    if text_file is not None:
        print(f"Loading {text_file} …")
        docs = text_file.read_text(encoding="utf-8").splitlines()
        return docs[:num_docs] if num_docs is not None else docs

    # only needed for the default corpus
    from datasets import load_dataset

    print(f"Loading {HF_DATASET} (non-streaming) …")
    ds = load_dataset(HF_DATASET, split="train")
    if num_docs is not None:
        return ds[:num_docs]["text"]
    return ds["text"]


def main() -> None:
    """Run the tokenize/detokenize benchmark and print a table row."""
    parser = argparse.ArgumentParser(
        description="Benchmark MergeTok tokenize_batch() and detokenize_batch()."
    )
    parser.add_argument("model", type=Path, help="Path to a saved .json model.")
    parser.add_argument(
        "--text-file",
        type=Path,
        default=None,
        help="Local corpus, one document per line (default: HF dataset).",
    )
    parser.add_argument(
        "--num-docs",
        type=int,
        default=None,
        help="Number of documents to encode (default: all).",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show library log messages."
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    docs = load_corpus(args.text_file, args.num_docs)
    if not docs:
        raise RuntimeError("No documents loaded.")

    total_chars = sum(len(d) for d in docs)
    total_bytes = sum(len(d.encode("utf-8")) for d in docs)
    corpus_mb = total_bytes / (1024 * 1024)

    with Tokenizer.load(args.model) as tokenizer:
        # --- Encoding ---
        t0 = time.perf_counter()
        encoded = tokenizer.tokenize_batch(docs)
        encode_elapsed = time.perf_counter() - t0
        encode_mbps = total_bytes / encode_elapsed / (1024 * 1024)

        # --- Decoding ---
        t0 = time.perf_counter()
        tokenizer.detokenize_batch(encoded)
        decode_elapsed = time.perf_counter() - t0
        total_tokens = sum(len(seq) for seq in encoded)
        decode_mtps = total_tokens / decode_elapsed / 1_000_000

        unk = tokenizer.unknown_index
        unknown_count = sum(seq.count(unk) for seq in encoded)
        vocab_size = tokenizer.vocab_size()
        n_rules = len(tokenizer.merge_rules)

    # --- Compression stats ---
    chars_per_token = total_chars / total_tokens if total_tokens else 0.0
    unknown_rate = unknown_count / total_tokens * 100 if total_tokens else 0.0

    # --- Output ---
    print()
    header = (
        f"| {'Corpus Size':14} | {'Vocab Size':10} | {'Merge Rules':11} "
        f"| {'Encoding Throughput':19} | {'Decoding Throughput':19} "
        f"| {'Chars per Token':15} | {'Unknown Rate':12} |"
    )
    sep = (
        f"| {'-' * 14} | {'-' * 10} | {'-' * 11} "
        f"| {'-' * 19} | {'-' * 19} "
        f"| {'-' * 15} | {'-' * 12} |"
    )
    row = (
        f"| {f'{corpus_mb:.2f} MB':14} | {vocab_size:10,} | {n_rules:11,} "
        f"| {f'{encode_mbps:.2f} MB/sec':19} | {f'{decode_mtps:.1f}M tokens/sec':19} "
        f"| {f'{chars_per_token:.2f}':15} | {f'{unknown_rate:.2f}%':12} |"
    )
    print(header)
    print(sep)
    print(row)
    print()


if __name__ == "__main__":
    main()
