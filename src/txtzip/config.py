from __future__ import annotations

from enum import StrEnum, auto
from pathlib import PurePosixPath


class FileType(StrEnum):
    """Categorization of file types used to pick a framing and a fence language.

    This is a heuristic classification based on file extensions only.
    """

    TEXT = auto()
    PYTHON = auto()
    TOML = auto()
    JSON = auto()
    MARKDOWN = auto()
    YAML = auto()
    HTML = auto()
    CSS = auto()
    SCSS = auto()
    JAVASCRIPT = auto()
    TYPESCRIPT = auto()
    BASH = auto()
    POWERSHELL = auto()
    BATCH = auto()
    RUST = auto()
    GO = auto()
    PHP = auto()
    RUBY = auto()
    SQL = auto()
    JAVA = auto()
    KOTLIN = auto()
    SWIFT = auto()
    CSHARP = auto()
    C = auto()
    CPP = auto()
    LUA = auto()
    PERL = auto()
    SCALA = auto()
    HASKELL = auto()
    ELIXIR = auto()
    ERLANG = auto()
    R = auto()
    JULIA = auto()
    DART = auto()
    XML = auto()
    INI = auto()
    LATEX = auto()
    OTHER = auto()


EXT2LANG: dict[str, FileType] = {
    ".bash": FileType.BASH,
    ".bat": FileType.BATCH,
    ".c": FileType.C,
    ".cc": FileType.CPP,
    ".cfg": FileType.INI,
    ".conf": FileType.INI,
    ".cpp": FileType.CPP,
    ".cs": FileType.CSHARP,
    ".css": FileType.CSS,
    ".cxx": FileType.CPP,
    ".dart": FileType.DART,
    ".erl": FileType.ERLANG,
    ".ex": FileType.ELIXIR,
    ".exs": FileType.ELIXIR,
    ".go": FileType.GO,
    ".h": FileType.C,
    ".hpp": FileType.CPP,
    ".hs": FileType.HASKELL,
    ".htm": FileType.HTML,
    ".html": FileType.HTML,
    ".ini": FileType.INI,
    ".java": FileType.JAVA,
    ".jl": FileType.JULIA,
    ".js": FileType.JAVASCRIPT,
    ".json": FileType.JSON,
    ".jsx": FileType.JAVASCRIPT,
    ".kt": FileType.KOTLIN,
    ".kts": FileType.KOTLIN,
    ".less": FileType.CSS,
    ".lua": FileType.LUA,
    ".markdown": FileType.MARKDOWN,
    ".md": FileType.MARKDOWN,
    ".mjs": FileType.JAVASCRIPT,
    ".php": FileType.PHP,
    ".pl": FileType.PERL,
    ".ps1": FileType.POWERSHELL,
    ".py": FileType.PYTHON,
    ".r": FileType.R,
    ".rb": FileType.RUBY,
    ".rs": FileType.RUST,
    ".scala": FileType.SCALA,
    ".scss": FileType.SCSS,
    ".sh": FileType.BASH,
    ".sql": FileType.SQL,
    ".swift": FileType.SWIFT,
    ".tex": FileType.LATEX,
    ".toml": FileType.TOML,
    ".ts": FileType.TYPESCRIPT,
    ".tsx": FileType.TYPESCRIPT,
    ".txt": FileType.TEXT,
    ".xml": FileType.XML,
    ".yaml": FileType.YAML,
    ".yml": FileType.YAML,
    ".zsh": FileType.BASH,
}

_FENCE_LANGUAGE: dict[FileType, str] = {
    FileType.PYTHON: "python",
    FileType.TOML: "toml",
    FileType.JSON: "json",
    FileType.MARKDOWN: "markdown",
    FileType.YAML: "yaml",
    FileType.HTML: "html",
    FileType.CSS: "css",
    FileType.SCSS: "scss",
    FileType.JAVASCRIPT: "javascript",
    FileType.TYPESCRIPT: "typescript",
    FileType.BASH: "bash",
    FileType.POWERSHELL: "powershell",
    FileType.BATCH: "batch",
    FileType.RUST: "rust",
    FileType.GO: "go",
    FileType.PHP: "php",
    FileType.RUBY: "ruby",
    FileType.SQL: "sql",
    FileType.JAVA: "java",
    FileType.KOTLIN: "kotlin",
    FileType.SWIFT: "swift",
    FileType.CSHARP: "csharp",
    FileType.C: "c",
    FileType.CPP: "cpp",
    FileType.LUA: "lua",
    FileType.PERL: "perl",
    FileType.SCALA: "scala",
    FileType.HASKELL: "haskell",
    FileType.ELIXIR: "elixir",
    FileType.ERLANG: "erlang",
    FileType.R: "r",
    FileType.JULIA: "julia",
    FileType.DART: "dart",
    FileType.XML: "xml",
    FileType.INI: "ini",
    FileType.LATEX: "latex",
    FileType.TEXT: "",
    FileType.OTHER: "",
}

MARKDOWN_EXTENSIONS = frozenset({".md", ".markdown"})

# Accepted in source-only mode.
SOURCE_CODE_EXTENSIONS = frozenset({
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".c", ".cpp", ".h", ".hpp",
    ".cs", ".go", ".rb", ".php", ".swift", ".kt", ".kts", ".rs", ".sh", ".bat",
    ".ps1", ".pl", ".lua", ".sql", ".scala", ".groovy", ".hs", ".erl", ".ex",
    ".exs", ".r", ".jl", ".f90", ".f95", ".f03", ".clj", ".cljc", ".cljs",
    ".coffee", ".dart", ".elm", ".fs", ".fsi", ".fsx", ".fsscript", ".gd",
    ".hbs", ".idr", ".nim", ".ml", ".mli", ".mll", ".mly",
    ".purs", ".rkt", ".vb", ".vbs", ".vba", ".feature", ".s", ".asm", ".sln",
    ".md", ".markdown", ".yml", ".yaml", ".json", ".xml", ".html", ".css",
    ".scss", ".less", ".ini", ".conf", ".config", ".toml", ".tex", ".bib",
})  # fmt: skip

CONFIG_FILE_NAMES = (".txtzip.yaml", ".txtzip.yml")

ALWAYS_IGNORED = (
    # version control
    ".git",
    ".svn",
    ".hg",
    ".gitignore",
    # OS artifacts
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    # editors
    ".vscode",
    ".idea",
    # dependencies and lockfiles
    "node_modules",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    *CONFIG_FILE_NAMES,
)

DEFAULT_OUTPUT_NAME = "text-archive"
ENV_ARGS_VARIABLE = "TXTZIP_ARGS"

# Leading bytes inspected by the binary detector.
BINARY_SNIFF_BYTES = 24


def guess_file_type(rel: str) -> FileType:
    """Heuristic guess of file type based on extension.

    Args:
        rel (str): The path (relative, POSIX separators) to guess the type for.

    Returns:
        FileType: The guessed file type, or FileType.OTHER if unknown.
    """
    return EXT2LANG.get(PurePosixPath(rel).suffix.lower(), FileType.OTHER)


def guess_language(file_type: FileType) -> str:
    """Get the code fence language tag for a given file type.

    Args:
        file_type (FileType): The categorized file type.

    Returns:
        str: The language tag, or an empty string if none is known.
    """
    return _FENCE_LANGUAGE.get(file_type, "")


def is_markdown(rel: str) -> bool:
    """Whether a path names a markdown document (emitted without fencing)."""
    return PurePosixPath(rel).suffix.lower() in MARKDOWN_EXTENSIONS


def is_source_file(rel: str) -> bool:
    """Whether a path's extension is in the source-only allow list."""
    return PurePosixPath(rel).suffix.lower() in SOURCE_CODE_EXTENSIONS
