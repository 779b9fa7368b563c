"""Unit tests for saving, loading and exporting tokenizer models."""

import json

import pytest

import mergetok as mtok
from mergetok import MergeTable, Tokenizer, TokenizerConfig
from mergetok.errors import CorruptModelError, InvalidModelError, ModelIOError
from mergetok.sanitise import render_token
from mergetok.serialization import FORMAT_VERSION, model_to_dict

TEXTS = ["hello world", "Hello, WORLD!", "wow hello xyz", "", "world hello world"]


def _write_model(path, **overrides):
    """Write a minimal valid artifact with selected fields replaced."""
    data = {
        "format": "mergetok",
        "version": FORMAT_VERSION,
        "vocabulary": ["<unk>", "<pad>", "##", "a", "b", "ab"],
        "merges": [["a", "b", "ab"]],
        "config": {},
    }
    data.update(overrides)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# Save and load round-trip
# ---------------------------------------------------------------------------


def test_save_load_roundtrip(hello_tokenizer, tmp_path):
    """A loaded model tokenizes, decodes and looks up like the original."""
    path = tmp_path / "tok.json"
    hello_tokenizer.save(path)

    loaded = Tokenizer.load(path)
    for text in TEXTS:
        ids = hello_tokenizer.tokenize(text)
        assert loaded.tokenize(text) == ids
        assert loaded.detokenize(ids) == hello_tokenizer.detokenize(ids)
    assert loaded.vocabulary.tokens() == hello_tokenizer.vocabulary.tokens()
    assert loaded.merge_rules == hello_tokenizer.merge_rules
    assert loaded.config == hello_tokenizer.config


def test_roundtrip_keeps_config(suffix_tokenizer, tmp_path):
    """Non-default config options survive persistence."""
    path = tmp_path / "nested" / "dir" / "suffix.json"
    mtok.save_model(suffix_tokenizer, path)

    loaded = mtok.load_model(path)
    assert loaded.config.boundary_policy is mtok.BoundaryPolicy.SUFFIX
    assert loaded.config.boundary_marker == "</w>"
    assert loaded.tokenize("ab ab a") == suffix_tokenizer.tokenize("ab ab a")


def test_roundtrip_keeps_appended_tokens(example_tokenizer, tmp_path):
    """Reserved tokens appended at construction are persisted with their indices."""
    path = tmp_path / "example.json"
    example_tokenizer.save(path)
    loaded = Tokenizer.load(path)
    assert loaded.unknown_index == example_tokenizer.unknown_index
    assert loaded.pad_index == example_tokenizer.pad_index


def test_artifact_layout(example_tokenizer):
    """The artifact holds the ordered vocabulary, rules and config."""
    data = model_to_dict(example_tokenizer)
    assert data["format"] == "mergetok"
    assert data["version"] == FORMAT_VERSION
    assert data["vocabulary"] == ["a", "b", "ab", "c", "##", "<unk>", "<pad>"]
    assert data["merges"] == [["a", "b", "ab"]]
    assert data["atomic"] == ["##"]
    assert data["config"]["boundary_policy"] == "prefix"
    json.dumps(data)


def test_roundtrip_keeps_atomic_symbols(tmp_path):
    """Extra atomic symbols of a prebuilt merge table are persisted."""
    table = MergeTable([("<x>", "a", "<x>a")], atomic=["<x>", "##"])
    tok = Tokenizer(["a", "<x>", "<x>a"], table)
    path = tmp_path / "atomic.json"
    tok.save(path)

    loaded = Tokenizer.load(path)
    assert loaded.merge_table.atomic() == ["<x>", "##"]
    assert loaded.merge_rules == tok.merge_rules
    assert loaded.vocabulary == tok.vocabulary
    assert loaded.tokenize("a <x>a") == tok.tokenize("a <x>a")


# IO failures
# ---------------------------------------------------------------------------


def test_load_missing_file(tmp_path):
    """An unreadable path is an IO error."""
    with pytest.raises(ModelIOError):
        Tokenizer.load(tmp_path / "missing.json")


def test_load_directory(tmp_path):
    """A directory is not a readable model file."""
    with pytest.raises(ModelIOError):
        Tokenizer.load(tmp_path)


def test_save_unwritable_location(hello_tokenizer, tmp_path):
    """Saving below a regular file fails with an IO error."""
    blocker = tmp_path / "file.txt"
    blocker.write_text("not a directory")
    with pytest.raises(ModelIOError):
        hello_tokenizer.save(blocker / "model.json")


# Corrupt artifacts
# ---------------------------------------------------------------------------


def test_load_invalid_json(tmp_path):
    """Truncated JSON is a corrupt model."""
    path = tmp_path / "bad.json"
    path.write_text('{"format": "mergetok", ', encoding="utf-8")
    with pytest.raises(CorruptModelError):
        Tokenizer.load(path)


def test_load_invalid_utf8(tmp_path):
    """Non UTF-8 bytes are a corrupt model."""
    path = tmp_path / "bad.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(CorruptModelError):
        Tokenizer.load(path)


def test_load_wrong_version(tmp_path):
    """An unrecognized version reports expected and found values."""
    path = _write_model(tmp_path / "v99.json", version=99)
    with pytest.raises(CorruptModelError) as exc_info:
        Tokenizer.load(path)
    assert exc_info.value.version_mismatch == (99, FORMAT_VERSION)


@pytest.mark.parametrize(
    "overrides",
    [
        {"format": "other"},
        {"vocabulary": {"a": 0}},
        {"merges": [["a", "b"]]},
        {"config": []},
        {"atomic": "##"},
        {"atomic": [5]},
        {"config": {"no_such_option": True}},
        {"config": {"boundary_policy": "sideways"}},
        {"vocabulary": ["<unk>", "<pad>", "##", "a", "b", 5]},
    ],
)
def test_load_structurally_invalid(tmp_path, overrides):
    """Wrong layouts and inconsistent content are corrupt models."""
    path = _write_model(tmp_path / "model.json", **overrides)
    with pytest.raises(CorruptModelError):
        Tokenizer.load(path)


def test_load_duplicate_tokens_chains_cause(tmp_path):
    """Duplicate tokens surface as CorruptModelError caused by InvalidModelError."""
    path = _write_model(
        tmp_path / "dup.json", vocabulary=["<unk>", "<pad>", "##", "a", "a", "b", "ab"]
    )
    with pytest.raises(CorruptModelError) as exc_info:
        Tokenizer.load(path)
    assert isinstance(exc_info.value.__cause__, InvalidModelError)


def test_load_missing_reserved_token(tmp_path):
    """A persisted model must already contain every reserved token."""
    path = _write_model(tmp_path / "nopad.json", vocabulary=["<unk>", "##", "a", "b", "ab"])
    with pytest.raises(CorruptModelError):
        Tokenizer.load(path)


def test_load_sparse_config_uses_defaults(tmp_path):
    """Options absent from the artifact take their default values."""
    loaded = Tokenizer.load(_write_model(tmp_path / "model.json"))
    assert loaded.config == TokenizerConfig()
    assert loaded.tokenize("ab") == [5]


# Vocab export
# ---------------------------------------------------------------------------


def test_export_vocab(hello_tokenizer, tmp_path):
    """The listing flags reserved tokens and shows merge derivations."""
    path = tmp_path / "tok.vocab"
    hello_tokenizer.export_vocab(path)
    lines = path.read_text(encoding="utf-8").splitlines()

    assert len(lines) == hello_tokenizer.vocab_size()
    assert lines[0] == "ST [0] <pad>"
    assert lines[2] == "[2] ##"
    assert "[13] [hell][o] -> hello" in lines


def test_render_token_escapes_and_quotes():
    """Control characters are escaped and whitespace-only tokens quoted."""
    assert render_token("a\nb") == "a\\u000ab"
    assert render_token(" ") == "' '"
    assert render_token("hello") == "hello"
