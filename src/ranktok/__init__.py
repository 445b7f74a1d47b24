"""ranktok: byte-level BPE tokenization over pretrained rank tables."""

from .errors import (
    ConstructionError,
    DisallowedSpecialTokenError,
    EncodingError,
    ModelLoadError,
    PatternError,
    RankTokError,
    SpecialTokenError,
    TokenizationError,
)
from .factory import (
    EncodingParams,
    encoding_for_model,
    encoding_name_for_model,
    get_encoding,
    get_encoding_params,
    list_encodings,
    list_models,
)
from .loader import dump_tiktoken_bpe, load_tiktoken_bpe
from .pattern import TokenPattern, list_patterns
from .ranks import MergeRankTable, SpecialTokenTable
from .splitter import PretokenizerSplitter
from .strategy import (
    AllowAll,
    AllowExplicit,
    AllowNone,
    AllowPolicy,
    DisallowAll,
    DisallowDefault,
    DisallowExplicit,
    DisallowPolicy,
)
from .tokenizer import Tokenizer

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ranktok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "MergeRankTable",
    "SpecialTokenTable",
    "PretokenizerSplitter",
    "TokenPattern",
    "AllowPolicy",
    "AllowNone",
    "AllowAll",
    "AllowExplicit",
    "DisallowPolicy",
    "DisallowDefault",
    "DisallowAll",
    "DisallowExplicit",
    "EncodingParams",
    "get_encoding",
    "get_encoding_params",
    "encoding_for_model",
    "encoding_name_for_model",
    "list_encodings",
    "list_models",
    "list_patterns",
    "load_tiktoken_bpe",
    "dump_tiktoken_bpe",
    "RankTokError",
    "ConstructionError",
    "SpecialTokenError",
    "DisallowedSpecialTokenError",
    "TokenizationError",
    "PatternError",
    "EncodingError",
    "ModelLoadError",
]
