"""
Saving and loading tokenizer models.

A model file is a UTF-8 JSON object with a format tag, an integer format
version, the ordered model sections and the multi-character symbols
the merge table treats as base alphabet::

    {
      "format": "mergetok",
      "version": 1,
      "vocabulary": ["<unk>", "<pad>", "a", ...],
      "merges": [["a", "b", "ab"], ...],
      "atomic": ["##"],
      "config": {"unknown_token": "<unk>", ...}
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Final

from ._decorators import measure_time
from .config import TokenizerConfig
from .errors import CorruptModelError, InvalidModelError, ModelIOError
from .merges import MergeTable
from .sanitise import render_token
from .tokenizer import Tokenizer

FORMAT_NAME: Final[str] = "mergetok"
FORMAT_VERSION: Final[int] = 1
SUPPORTED_VERSIONS: Final[tuple[int, ...]] = (FORMAT_VERSION,)

log = logging.getLogger(__name__)


def model_to_dict(tokenizer: Tokenizer) -> dict[str, Any]:
    """Return the JSON-compatible representation of a tokenizer model."""
    return {
        "format": FORMAT_NAME,
        "version": FORMAT_VERSION,
        "vocabulary": tokenizer.vocabulary.tokens(),
        "merges": [list(rule) for rule in tokenizer.merge_rules],
        "atomic": tokenizer.merge_table.atomic(),
        "config": tokenizer.config.to_dict(),
    }


@measure_time
def save_model(tokenizer: Tokenizer, path: str | Path) -> None:
    """
    Persist a tokenizer model to ``path``, creating parent directories.

    :raises ModelIOError: If the location cannot be written.
    """
    model_path = Path(path)
    log.info(f"saving tokenizer to {model_path}")

    payload = json.dumps(model_to_dict(tokenizer), ensure_ascii=False, indent=1)
    try:
        # create directory if does not exist
        model_path.parent.mkdir(parents=True, exist_ok=True)
        with model_path.open("w", encoding="utf-8", newline="\n") as f:
            f.write(payload)
    except OSError as e:
        raise ModelIOError("cannot write model file", model_path=str(model_path)) from e

    log.info(
        f"tokenizer saved: {tokenizer.vocab_size()} tokens, "
        f"{len(tokenizer.merge_rules)} merge rules"
    )


def _require(data: dict[str, Any], key: str, kind: type, model_path: str) -> Any:
    """Fetch a required section and check its JSON type."""
    if key not in data:
        raise CorruptModelError(f"missing section {key!r}", model_path=model_path)
    value = data[key]
    if not isinstance(value, kind):
        raise CorruptModelError(
            f"section {key!r} must be a {kind.__name__}", model_path=model_path
        )
    return value


def model_from_dict(
    data: object, model_path: str = "", *, factory: type[Tokenizer] = Tokenizer
) -> Tokenizer:
    """
    Build a tokenizer from the representation produced by :func:`model_to_dict`.

    Files written before the ``atomic`` section existed fall back to the
    boundary marker implied by the config.

    :param factory: Tokenizer class to instantiate.
    :raises CorruptModelError: If the layout, version or model content is invalid.
    """
    if not isinstance(data, dict):
        raise CorruptModelError("model root must be a JSON object", model_path=model_path)

    if data.get("format") != FORMAT_NAME:
        raise CorruptModelError(
            f"not a {FORMAT_NAME} model (format: {data.get('format')!r})",
            model_path=model_path,
        )

    version = data.get("version")
    # bool is an int subclass, reject it explicitly
    if isinstance(version, bool) or version not in SUPPORTED_VERSIONS:
        raise CorruptModelError(
            "unsupported model version",
            model_path=model_path,
            version_mismatch=(version, FORMAT_VERSION),
        )

    vocabulary = _require(data, "vocabulary", list, model_path)
    merges = _require(data, "merges", list, model_path)
    raw_config = _require(data, "config", dict, model_path)

    for rank, rule in enumerate(merges):
        if not isinstance(rule, list) or len(rule) != 3:
            raise CorruptModelError(
                f"merge rule {rank} must be a [left, right, merged] list",
                model_path=model_path,
            )

    try:
        config = TokenizerConfig.from_dict(raw_config)
        atomic = data.get("atomic", [])
        if not isinstance(atomic, list) or not all(isinstance(sym, str) for sym in atomic):
            raise CorruptModelError(
                "section 'atomic' must be a list of strings", model_path=model_path
            )
        # a persisted model is complete: nothing may be appended on load
        missing = [tok for tok in config.reserved_tokens() if tok not in vocabulary]
        if missing:
            raise CorruptModelError(
                f"reserved tokens missing from vocabulary: {missing}",
                model_path=model_path,
            )
        if config.marks_boundaries and config.boundary_marker not in atomic:
            atomic = [*atomic, config.boundary_marker]
        return factory(vocabulary, MergeTable(merges, atomic=atomic), config)
    except InvalidModelError as e:
        raise CorruptModelError(
            f"inconsistent model: {e}", model_path=model_path
        ) from e


@measure_time
def load_model(
    path: str | Path, *, factory: type[Tokenizer] = Tokenizer
) -> Tokenizer:
    """
    Load a tokenizer model written by :func:`save_model`.

    :param factory: Tokenizer class to instantiate.
    :raises ModelIOError: If the file cannot be read.
    :raises CorruptModelError: If the file is not a valid model.
    """
    model_path = Path(path)
    log.info(f"loading model from {model_path}")

    try:
        raw = model_path.read_bytes()
    except OSError as e:
        raise ModelIOError("cannot read model file", model_path=str(model_path)) from e

    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptModelError(
            "model file is not valid UTF-8 JSON", model_path=str(model_path)
        ) from e

    tokenizer = model_from_dict(data, str(model_path), factory=factory)

    log.info(
        f"model loaded successfully: {tokenizer.vocab_size()} tokens, "
        f"{len(tokenizer.merge_rules)} merge rules"
    )
    return tokenizer


def export_vocab(tokenizer: Tokenizer, path: str | Path) -> None:
    """
    Write a human-readable listing of every token.

    Tokens produced by a merge rule show the rule's inputs; reserved tokens
    are flagged with ``ST``. Control characters are escaped.

    :raises ModelIOError: If the location cannot be written.
    """
    vocab_path = Path(path)
    log.debug(f"saving vocab to {vocab_path}")

    # first rule producing each token, in rank order
    derivations: dict[str, tuple[str, str]] = {}
    for rule in tokenizer.merge_rules:
        derivations.setdefault(rule.merged, rule.pair)
    special = tokenizer.special_tokens

    try:
        vocab_path.parent.mkdir(parents=True, exist_ok=True)
        with vocab_path.open("w", encoding="utf-8", newline="\n") as f:
            for idx, tok in tokenizer.vocabulary.items():
                subword = render_token(tok)
                if tok in special:
                    f.write(f"ST [{idx}] {subword}\n")
                elif tok in derivations:
                    left, right = derivations[tok]
                    f.write(
                        f"[{idx}] [{render_token(left)}][{render_token(right)}] -> {subword}\n"
                    )
                else:
                    f.write(f"[{idx}] {subword}\n")
    except OSError as e:
        raise ModelIOError("cannot write vocab file", model_path=str(vocab_path)) from e


__all__ = [
    "FORMAT_NAME",
    "FORMAT_VERSION",
    "model_to_dict",
    "model_from_dict",
    "save_model",
    "load_model",
    "export_vocab",
]
