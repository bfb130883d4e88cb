"""
path-audit - Detect and explain conflicting executables on the search path.

Core Modules:
- Pipeline: path parsing, executable discovery, symlink resolution
- Analysis: install mechanism classification, conflict grouping and categorization
- Enrichment: version extraction, content hashing
- Reports: JSON reports, filtering, human rendering
"""

__version__ = "1.0.0"
__author__ = "path-audit Contributors"

# Version info for backward compatibility
VERSION = __version__

# Data model
from .models import (
    CATEGORIES,
    SEVERITIES,
    ConflictGroup,
    ExecutableRecord,
    ManagerClassification,
    ScanResult,
    SearchDirectory,
    Summary,
    VersionInfo,
)
from .errors import (
    PathAuditError,
    PathListUnavailableError,
    DirectoryAccessError,
    SymlinkError,
    CircularSymlinkError,
    SymlinkDepthError,
    BrokenSymlinkError,
    ReportError,
)

# Environment
from .environment import EnvironmentFacts, PlatformFacts, detect_platform, detect_wsl

# Pipeline
from .path_parser import parse_path_list, parse_system_path
from .discovery import discover_executables, scan_directory
from .symlinks import SymlinkResolver
from .managers import ManagerClassifier, classify_path
from .categorizer import ConflictCategorizer
from .conflicts import ConflictDetector
from .versions import VersionExtractor
from .hashing import compute_content_hash
from .analyzer import AnalysisOptions, PathAnalyzer

# Configuration and reports
from .config import Config, ScanPreferences, OutputPreferences, load_config, load_config_file
from .snapshot import write_report, load_report, filter_conflicts
from .render import format_human, render_json

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Data model
    "CATEGORIES",
    "SEVERITIES",
    "ConflictGroup",
    "ExecutableRecord",
    "ManagerClassification",
    "ScanResult",
    "SearchDirectory",
    "Summary",
    "VersionInfo",
    # Errors
    "PathAuditError",
    "PathListUnavailableError",
    "DirectoryAccessError",
    "SymlinkError",
    "CircularSymlinkError",
    "SymlinkDepthError",
    "BrokenSymlinkError",
    "ReportError",
    # Environment
    "EnvironmentFacts",
    "PlatformFacts",
    "detect_platform",
    "detect_wsl",
    # Pipeline
    "parse_path_list",
    "parse_system_path",
    "discover_executables",
    "scan_directory",
    "SymlinkResolver",
    "ManagerClassifier",
    "classify_path",
    "ConflictCategorizer",
    "ConflictDetector",
    "VersionExtractor",
    "compute_content_hash",
    "AnalysisOptions",
    "PathAnalyzer",
    # Configuration and reports
    "Config",
    "ScanPreferences",
    "OutputPreferences",
    "load_config",
    "load_config_file",
    "write_report",
    "load_report",
    "filter_conflicts",
    "format_human",
    "render_json",
]
