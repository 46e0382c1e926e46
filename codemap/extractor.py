"""
High-level entry points for codemap extraction.

``extract_codemap`` is the per-file engine: a pure function from
(path, content, language, options) to a Codemap that records tree
acquisition problems in ``parse_error`` instead of raising. The remaining
functions read files, discover source trees and fan extraction out over a
thread pool.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from codemap.adapters import get_adapter
from codemap.config import EXTENSION_MAP, SKIP_DIRECTORIES
from codemap.errors import ParseFailure, UnsupportedLanguageError
from codemap.models import Codemap, ExtractOptions, Language
from codemap.parser import count_error_nodes, parse_source, syntax_failure
from codemap.render import render_codemap
from codemap.tokens import count_tokens
from core.structured_logging import file_scope

logger = logging.getLogger(__name__)

TokenCounterFn = Callable[[str], int]


class ExtractionStats:
    """Statistics for a batch extraction."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.declarations_extracted = 0
        self.parse_errors = 0
        self.total_tokens = 0

    def record(self, codemap: Codemap) -> None:
        self.files_processed += 1
        self.declarations_extracted += codemap.declaration_count()
        self.total_tokens += codemap.token_count
        if codemap.parse_error is not None:
            self.parse_errors += 1

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "declarations_extracted": self.declarations_extracted,
            "parse_errors": self.parse_errors,
            "total_tokens": self.total_tokens,
        }

    def __str__(self) -> str:
        return (
            f"ExtractionStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, declarations={self.declarations_extracted}, "
            f"parse_errors={self.parse_errors}, tokens={self.total_tokens})"
        )


def _finalize(codemap: Codemap, token_counter: Optional[TokenCounterFn]) -> Codemap:
    counter = token_counter or count_tokens
    return codemap.with_token_count(counter(render_codemap(codemap)))


def extract_codemap(
    path: str,
    content: Union[str, bytes],
    language: Union[Language, str],
    options: Optional[ExtractOptions] = None,
    token_counter: Optional[TokenCounterFn] = None,
) -> Codemap:
    """Extract the imports and declarations of one source file.

    Args:
        path: File path recorded in the codemap. Never read.
        content: Source text, or raw bytes that must decode as UTF-8.
        language: Language to parse as.
        options: Extraction options; defaults capture everything without docs.
        token_counter: Callable counting tokens of the rendered codemap.
            Defaults to ``codemap.tokens.count_tokens``.

    Returns:
        The Codemap. Syntax errors and undecodable input are reported in
        ``parse_error`` alongside whatever could still be extracted.

    Raises:
        UnsupportedLanguageError: If ``language`` is unknown. Raised before
            any parsing takes place.

    Example:
        >>> cm = extract_codemap("lib.rs", "pub fn answer() -> u32 { 42 }", "rust")
        >>> cm.declarations[0].signature
        'pub fn answer() -> u32'
    """
    language = Language.coerce(language)
    adapter = get_adapter(language)
    options = options or ExtractOptions()

    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning(f"File {path} is not valid UTF-8")
            error = ParseFailure(f"invalid UTF-8 at byte {e.start}")
            return _finalize(Codemap.with_error(path, language, error.describe()), token_counter)

    try:
        tree = parse_source(content, language)
    except ParseFailure as e:
        logger.warning(f"Could not parse {path}: {e}")
        return _finalize(Codemap.with_error(path, language, e.describe()), token_counter)

    failure = syntax_failure(tree)
    if failure is not None:
        logger.warning(
            f"File {path} contains syntax errors ({count_error_nodes(tree)} error nodes), "
            f"first at line {failure.line}"
        )

    source = content.encode("utf-8")
    codemap = Codemap(
        path=path,
        language=language,
        imports=tuple(adapter.extract_imports(tree, source)),
        declarations=tuple(adapter.extract_declarations(tree, source, options)),
        parse_error=failure.describe() if failure is not None else None,
    )
    if not options.include_private:
        codemap = codemap.public_only()

    logger.debug(
        f"Extracted {len(codemap.imports)} imports and {len(codemap.declarations)} declarations from {path}"
    )
    return _finalize(codemap, token_counter)


def _relative_path(file_path: str, repo_root: Optional[str]) -> str:
    root = os.path.abspath(repo_root) if repo_root else os.path.dirname(file_path)
    try:
        return os.path.relpath(file_path, root)
    except ValueError:
        logger.warning(f"Cannot compute relative path for {file_path} from {root}. Using absolute path.")
        return file_path


def extract_file(
    file_path: str,
    options: Optional[ExtractOptions] = None,
    repo_root: Optional[str] = None,
    token_counter: Optional[TokenCounterFn] = None,
) -> Codemap:
    """Extract a codemap from a source file on disk.

    Args:
        file_path: Path to the file; its extension selects the language.
        options: Extraction options.
        repo_root: Directory the recorded path is made relative to. Defaults
            to the file's parent directory.
        token_counter: Token counting callable.

    Returns:
        The file's Codemap.

    Raises:
        FileNotFoundError: If the file does not exist.
        UnsupportedLanguageError: If the extension maps to no language.
    """
    file_path = os.path.abspath(file_path)
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    language = Language.from_path(file_path)
    if language is None:
        raise UnsupportedLanguageError(
            f"File {file_path} has no supported extension. "
            f"Expected one of: {', '.join(sorted(EXTENSION_MAP))}"
        )

    relative_path = _relative_path(file_path, repo_root)
    with open(file_path, "rb") as f:
        content = f.read()

    with file_scope(relative_path):
        return extract_codemap(relative_path, content, language, options, token_counter)


def _language_filter(languages: Optional[Iterable[Union[Language, str]]]) -> Optional[Set[Language]]:
    if languages is None:
        return None
    return {Language.coerce(lang) for lang in languages}


def discover_source_files(
    directory: str,
    languages: Optional[Iterable[Union[Language, str]]] = None,
) -> List[str]:
    """Recursively discover supported source files in a directory.

    Hidden directories and common build/vendor directories are skipped.

    Args:
        directory: Root directory to search.
        languages: Restrict discovery to these languages.

    Returns:
        Sorted absolute paths.
    """
    wanted = _language_filter(languages)
    directory = os.path.abspath(directory)
    found = []

    logger.info(f"Discovering source files in {directory}")

    for root, dirs, files in os.walk(directory):
        dirs[:] = [d for d in dirs if not d.startswith(".") and d not in SKIP_DIRECTORIES]

        for name in files:
            language = Language.from_path(name)
            if language is None or (wanted is not None and language not in wanted):
                continue
            found.append(os.path.join(root, name))

    logger.info(f"Found {len(found)} source files")
    return sorted(found)


def extract_directory(
    directory: str,
    options: Optional[ExtractOptions] = None,
    repo_root: Optional[str] = None,
    max_workers: Optional[int] = None,
    continue_on_error: bool = True,
    languages: Optional[Iterable[Union[Language, str]]] = None,
    token_counter: Optional[TokenCounterFn] = None,
) -> Tuple[List[Codemap], ExtractionStats]:
    """Extract codemaps from every supported file in a directory tree.

    Files are extracted concurrently; the result is sorted by path once all
    files have been collected.

    Args:
        directory: Root directory to process.
        options: Extraction options.
        repo_root: Root for relative paths. Defaults to ``directory``.
        max_workers: Thread pool size. None lets the executor decide.
        continue_on_error: If True, keep going when a file fails.
            If False, raise the first failure.
        languages: Restrict extraction to these languages.
        token_counter: Token counting callable.

    Returns:
        A tuple of (codemaps, stats).

    Raises:
        FileNotFoundError: If directory does not exist.

    Example:
        >>> codemaps, stats = extract_directory("/path/to/repo")
        >>> print(f"{stats.declarations_extracted} declarations in {stats.files_processed} files")
    """
    directory = os.path.abspath(directory)
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    repo_root = os.path.abspath(repo_root) if repo_root else directory
    stats = ExtractionStats()
    codemaps: List[Codemap] = []

    files = discover_source_files(directory, languages)
    if not files:
        logger.warning(f"No source files found in {directory}")
        return codemaps, stats

    logger.info(f"Processing {len(files)} source files from {directory}")

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(extract_file, path, options, repo_root, token_counter): path
            for path in files
        }
        for future in as_completed(futures):
            path = futures[future]
            try:
                codemap = future.result()
            except (OSError, UnsupportedLanguageError) as e:
                logger.error(f"Invalid file {path}: {e}")
                stats.files_failed += 1
                if not continue_on_error:
                    for pending in futures:
                        pending.cancel()
                    raise
                continue
            except Exception as e:
                logger.error(f"Unexpected error processing {path}: {e}", exc_info=True)
                stats.files_failed += 1
                if not continue_on_error:
                    for pending in futures:
                        pending.cancel()
                    raise
                continue

            codemaps.append(codemap)
            stats.record(codemap)

    codemaps.sort(key=lambda c: c.path)
    logger.info(f"Extraction complete: {stats}")
    return codemaps, stats


def extract_to_dict_list(
    source: str,
    options: Optional[ExtractOptions] = None,
    repo_root: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Extract codemaps and return them as tagged records.

    Detects whether ``source`` is a file or a directory.

    Example:
        >>> records = extract_to_dict_list("src/")
        >>> import json
        >>> json.dump(records, open("codemaps.json", "w"), indent=2)
    """
    source = os.path.abspath(source)

    if os.path.isfile(source):
        codemaps = [extract_file(source, options, repo_root)]
    elif os.path.isdir(source):
        codemaps, stats = extract_directory(source, options, repo_root)
        logger.info(f"Extraction stats: {stats}")
    else:
        raise FileNotFoundError(f"Source not found: {source}")

    return [codemap.to_dict() for codemap in codemaps]
