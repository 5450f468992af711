"""
MCP-facing correlation analysis.

Resolves a JMX script, loads it, runs the detection engine and (optionally)
persists the report. The engine itself lives in engine.py and never touches
configuration or the filesystem.
"""

import logging
import os
from typing import Any, Dict, Optional

from fastmcp import Context

from utils.config import load_config
from utils.file_utils import resolve_jmx_path, save_correlation_report

from .constants import DEFAULT_MAX_TREE_DEPTH
from .engine import detect_correlations
from .exceptions import DocumentNotFoundError, MalformedDocumentError
from .loader import load_jmx_document

logger = logging.getLogger(__name__)

# === Configuration ===
CONFIG = load_config()
CORRELATION_CONFIG = CONFIG.get("correlation", {})
MAX_TREE_DEPTH = CORRELATION_CONFIG.get("max_tree_depth", DEFAULT_MAX_TREE_DEPTH)
SAVE_REPORTS = CORRELATION_CONFIG.get("save_reports", True)


def analyze_jmx_file(jmx_file: str) -> Dict[str, Any]:
    """
    Synchronous core: resolve, load and scan one JMX script.

    Raises:
        ValueError: for an empty or out-of-directory jmx_file.
        DocumentNotFoundError / MalformedDocumentError: from the loader.
    """
    jmx_path = resolve_jmx_path(jmx_file)
    document = load_jmx_document(jmx_path, max_depth=MAX_TREE_DEPTH)
    return detect_correlations(document, os.path.basename(jmx_path), max_depth=MAX_TREE_DEPTH)


def _error(status: str, message: str, jmx_file: str) -> Dict[str, Any]:
    return {
        "status": status,
        "message": message,
        "jmx_file": jmx_file,
        "report_path": None,
        "report": None,
    }


async def analyze_jmx_correlations(jmx_file: str, ctx: Optional[Context] = None) -> Dict[str, Any]:
    """
    Main entry point for the detect_correlations MCP tool.

    Args:
        jmx_file: Script name under the JMX directory, or an absolute path.
        ctx: FastMCP context for logging.

    Returns:
        dict with status, message, jmx_file, report_path and the report itself.
    """
    try:
        report = analyze_jmx_file(jmx_file)
    except DocumentNotFoundError as e:
        logger.warning("%s", e)
        if ctx:
            await ctx.error(str(e))
        return _error("NOT_FOUND", str(e), jmx_file)
    except (MalformedDocumentError, ValueError) as e:
        msg = f"Invalid JMX input: {e}"
        logger.warning("%s", msg)
        if ctx:
            await ctx.error(msg)
        return _error("ERROR", msg, jmx_file)

    report_path = None
    if SAVE_REPORTS:
        try:
            report_path = save_correlation_report(report["jmxFile"], report)
        except OSError as e:
            logger.warning("Could not save correlation report for '%s': %s", jmx_file, e)
            if ctx:
                await ctx.warning(f"Correlation report not saved: {e}")

    msg = (
        f"Correlation scan complete: {report['correlationCandidates']} candidate(s) "
        f"across {report['samplersScanned']} sampler(s)"
    )
    if ctx:
        await ctx.info(msg if not report_path else f"{msg}: {report_path}")

    return {
        "status": "OK",
        "message": msg,
        "jmx_file": jmx_file,
        "report_path": report_path,
        "report": report,
    }
