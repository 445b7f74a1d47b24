"""Factory functions for the named pretrained encodings."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Literal

from .errors import EncodingError, ModelLoadError
from .loader import RANKS_SUFFIX, load_tiktoken_bpe
from .pattern import TokenPattern
from .tokenizer import Tokenizer
from .types import SpecialTokens

log = logging.getLogger(__name__)

# directory holding <rank_file>.tiktoken when no explicit path is given
DATA_DIR_ENV: Final[str] = "RANKTOK_DATA_DIR"

ENDOFTEXT: Final[str] = "<|endoftext|>"
FIM_PREFIX: Final[str] = "<|fim_prefix|>"
FIM_MIDDLE: Final[str] = "<|fim_middle|>"
FIM_SUFFIX: Final[str] = "<|fim_suffix|>"
ENDOFPROMPT: Final[str] = "<|endofprompt|>"


@dataclass(frozen=True)
class EncodingParams:
    """Everything needed to build a named encoding except the rank table itself."""

    name: str
    pattern: str
    # stem of the rank file; p50k_edit shares p50k_base ranks
    rank_file: str
    special_tokens: SpecialTokens = field(default_factory=dict)
    explicit_n_vocab: int | None = None


# Encoding registry
# ===================================================================================

EncodingName = Literal["r50k_base", "p50k_base", "p50k_edit", "cl100k_base"]

_ENCODINGS: Final[dict[str, EncodingParams]] = {
    "r50k_base": EncodingParams(
        name="r50k_base",
        pattern=TokenPattern.GPT2.value,
        rank_file="r50k_base",
        special_tokens={ENDOFTEXT: 50256},
        explicit_n_vocab=50257,
    ),
    "p50k_base": EncodingParams(
        name="p50k_base",
        pattern=TokenPattern.GPT2.value,
        rank_file="p50k_base",
        special_tokens={ENDOFTEXT: 50256},
        explicit_n_vocab=50281,
    ),
    "p50k_edit": EncodingParams(
        name="p50k_edit",
        pattern=TokenPattern.GPT2.value,
        rank_file="p50k_base",
        special_tokens={
            ENDOFTEXT: 50256,
            FIM_PREFIX: 50281,
            FIM_MIDDLE: 50282,
            FIM_SUFFIX: 50283,
        },
    ),
    "cl100k_base": EncodingParams(
        name="cl100k_base",
        pattern=TokenPattern.GPT4.value,
        rank_file="cl100k_base",
        special_tokens={
            ENDOFTEXT: 100257,
            FIM_PREFIX: 100258,
            FIM_MIDDLE: 100259,
            FIM_SUFFIX: 100260,
            ENDOFPROMPT: 100276,
        },
    ),
}

_MODEL_TO_ENCODING: Final[dict[str, EncodingName]] = {
    "gpt-4": "cl100k_base",
    "gpt-3.5-turbo": "cl100k_base",
    "text-embedding-ada-002": "cl100k_base",
    "text-davinci-002": "p50k_base",
    "text-davinci-003": "p50k_base",
    "gpt2": "r50k_base",
    "davinci": "r50k_base",
}


def list_encodings() -> list[str]:
    """Return names of all built-in encodings."""
    return list(_ENCODINGS.keys())


def list_models() -> list[str]:
    """Return model names that map to a built-in encoding."""
    return list(_MODEL_TO_ENCODING.keys())


def get_encoding_params(name: str) -> EncodingParams:
    """
    Look up the parameters of a named encoding.

    :raises EncodingError: If ``name`` is not a built-in encoding.
    """
    if name not in _ENCODINGS:
        raise EncodingError(
            "unknown encoding name", invalid_name=name, available=list_encodings()
        )
    return _ENCODINGS[name]


def encoding_name_for_model(model: str) -> str:
    """
    Return the encoding name used by ``model``.

    :raises EncodingError: If ``model`` is not a known model name.
    """
    if model not in _MODEL_TO_ENCODING:
        raise EncodingError(
            "unknown model name", invalid_name=model, available=list_models()
        )
    return _MODEL_TO_ENCODING[model]


def _resolve_ranks_file(params: EncodingParams, ranks_file: str | Path | None) -> Path:
    """Pick the explicit rank file or fall back to ``$RANKTOK_DATA_DIR``."""
    if ranks_file is not None:
        return Path(ranks_file)

    data_dir = os.environ.get(DATA_DIR_ENV, "").strip()
    if not data_dir:
        raise ModelLoadError(
            f"no rank file given for {params.name} and {DATA_DIR_ENV} is not set"
        )
    return Path(data_dir) / f"{params.rank_file}{RANKS_SUFFIX}"


def get_encoding(name: EncodingName | str, ranks_file: str | Path | None = None) -> Tokenizer:
    """
    Build the tokenizer for a named encoding.

    :param name: Built-in encoding name (e.g., "cl100k_base").
    :param ranks_file: Path to the tiktoken rank file. Defaults to
                       ``$RANKTOK_DATA_DIR/<rank_file>.tiktoken``.
    :return: Configured tokenizer.
    :raises EncodingError: If ``name`` is unknown.
    :raises ModelLoadError: If the rank file cannot be located or parsed.
    :raises ConstructionError: If the ranks disagree with the encoding's vocabulary size.

    .. code-block:: python

        tokenizer = get_encoding("cl100k_base", "data/cl100k_base.tiktoken")
        tokens = tokenizer.encode("Hello world")
    """
    params = get_encoding_params(name)
    path = _resolve_ranks_file(params, ranks_file)

    log.info(f"building encoding {params.name} from {path}")

    return Tokenizer(
        params.pattern,
        load_tiktoken_bpe(path),
        params.special_tokens,
        explicit_n_vocab=params.explicit_n_vocab,
        name=params.name,
    )


def encoding_for_model(model: str, ranks_file: str | Path | None = None) -> Tokenizer:
    """Build the tokenizer used by ``model``; see :func:`get_encoding`."""
    return get_encoding(encoding_name_for_model(model), ranks_file)
