"""Directory and file resolution engine."""

from .index import IndexBackend, LocateIndex, NullIndex, SpotlightIndex, WindowsSearchIndex, default_index
from .known_folders import KnownFolders, SpecialFolder, resolve_known_folder
from .models import DirectoryMatch, MatchSource, ResolutionContext, SearchOutcome, SkippedDirectory
from .resolver import PathResolver, find_file_in_directory
from .search import DirectorySearcher, score_name
from .terms import STOP_WORDS, SearchTermSet, extract_terms

__all__ = [
    "DirectoryMatch",
    "DirectorySearcher",
    "IndexBackend",
    "KnownFolders",
    "LocateIndex",
    "MatchSource",
    "NullIndex",
    "PathResolver",
    "ResolutionContext",
    "STOP_WORDS",
    "SearchOutcome",
    "SearchTermSet",
    "SkippedDirectory",
    "SpecialFolder",
    "SpotlightIndex",
    "WindowsSearchIndex",
    "default_index",
    "extract_terms",
    "find_file_in_directory",
    "resolve_known_folder",
    "score_name",
]
