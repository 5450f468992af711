# JMeter MCP Server
# Runs JMeter test plans, analyzes their results, converts Postman collections
# to JMX, and detects correlation candidates in existing JMX scripts.
from fastmcp import FastMCP, Context  # ✅ FastMCP 2.x import
from starlette.requests import Request
from starlette.responses import FileResponse, JSONResponse
from typing import Optional, List
import json
import logging
import os
import sys

from utils.config import load_config

CONFIG = load_config()
SERVER_CONFIG = CONFIG.get("server", {})

logging.basicConfig(
    level=CONFIG.get("logging", {}).get("level", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    stream=sys.stderr,  # stdout belongs to the stdio transport
)
logger = logging.getLogger("jmeter")

mcp = FastMCP(
    name="jmeter",
)

from services.correlations.analyzer import analyze_jmx_correlations
from services.jmeter_runner import (
    run_jmeter_test,
    list_jmx_scripts,
    build_report_zip,
    cleanup_reports as cleanup_report_dirs,
)
from services.results_analyzer import analyze_run
from services.script_generator import generate_jmx_from_postman
import utils.file_utils as file_utils

# ----------------------------------------------------------
# JMeter JMX Generation
# ----------------------------------------------------------

@mcp.tool()
async def generate_jmeter_script(collection_path: str, ctx: Context) -> dict:
    """
    Generate a JMeter JMX script from a Postman collection (v2.x) JSON file.
    Args:
        collection_path (str): Path to the Postman collection JSON.
        ctx (Context, optional): FastMCP context for state/error details.

    Returns:
        dict: Output JMX path, sampler count, status and message.
    """
    return await generate_jmx_from_postman(collection_path, ctx)

# ----------------------------------------------------------
# Correlation Detection
# ----------------------------------------------------------

@mcp.tool()
async def detect_correlations(jmx_file: str, ctx: Context) -> dict:
    """
    Scan a JMX script and suggest correlation candidates: hardcoded tokens and IDs
    that likely come from an earlier response.
    Args:
        jmx_file (str): Script name under the JMX directory, or an absolute path.
        ctx (Context, optional): FastMCP context for state/error details.

    Returns:
        dict: {
            "status": "OK" | "NOT_FOUND" | "ERROR",
            "message": str,
            "jmx_file": str,
            "report_path": str | None,
            "report": {jmxFile, samplersScanned, correlationCandidates, suggestions} | None
        }
    """
    return await analyze_jmx_correlations(jmx_file, ctx)

# ----------------------------------------------------------
# JMeter Test Execution Tools
# ----------------------------------------------------------

@mcp.tool()
async def list_jmeter_scripts(ctx: Context) -> dict:
    """
    List the .jmx scripts available in the configured JMX directory.

    Returns:
        dict: {
            "jmx_dir": str,
            "scripts": [...],
            "count": int,
            "status": "OK" | "NOT_FOUND" | "EMPTY",
            "message": str
        }
    """
    return list_jmx_scripts()

@mcp.tool()
async def start_jmeter_test(jmx_file: str, ctx: Context, jmeter_args: Optional[List[str]] = None) -> dict:
    """
    Run a JMeter .jmx file in non-GUI mode and wait for it to complete.
    Args:
        jmx_file (str): Script name under the JMX directory, or an absolute path.
        jmeter_args (list[str], optional): Extra JMeter command-line arguments.
        ctx (Context, optional): FastMCP context for tracking state, status, or error reporting.

    Returns:
        dict: Run id, artifact paths, stdout/stderr, return code and status.
    """
    return await run_jmeter_test(jmx_file, jmeter_args, ctx)

@mcp.tool()
async def get_report_zip(run_id: str, ctx: Context) -> dict:
    """
    Return the HTML dashboard of a run as a base64-encoded ZIP.
    Args:
        run_id (str): Run identifier returned by start_jmeter_test.

    Returns:
        dict: {"file_name": str, "data": str} or an error status.
    """
    try:
        return build_report_zip(run_id)
    except FileNotFoundError as e:
        await ctx.error(str(e))
        return {"status": "NOT_FOUND", "message": str(e)}
    except ValueError as e:
        await ctx.error(str(e))
        return {"status": "ERROR", "message": str(e)}

@mcp.tool()
async def analyze_jmeter_run(run_id: str, ctx: Context) -> dict:
    """
    Summarize result.jtl of a run: error rate, response-time percentiles, throughput.
    Args:
        run_id (str): Run identifier returned by start_jmeter_test.

    Returns:
        dict: {"status", "run_id", "jtl_path", "summary" | "message"}
    """
    return analyze_run(run_id)

@mcp.tool()
async def cleanup_reports(ctx: Context) -> dict:
    """
    Delete all generated run reports and correlation reports.
    """
    return cleanup_report_dirs()

# ----------------------------------------------------------
# HTTP API (served with the http transport)
# ----------------------------------------------------------

def _json(payload: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(payload, status_code=status_code)

_STATUS_CODES = {"OK": 200, "NOT_FOUND": 404, "ERROR": 400}

@mcp.custom_route("/tests", methods=["GET"])
async def http_list_tests(request: Request) -> JSONResponse:
    result = list_jmx_scripts()
    return _json({"tests": [s["filename"] for s in result["scripts"]]})

@mcp.custom_route("/run", methods=["POST"])
async def http_run_test(request: Request) -> JSONResponse:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return _json({"error": "Request body must be JSON"}, 400)
    if not isinstance(body, dict):
        return _json({"error": "Request body must be a JSON object"}, 400)
    jmx_file = body.get("jmxFile")
    if not jmx_file:
        return _json({"error": "jmxFile is required"}, 400)
    result = await run_jmeter_test(jmx_file, body.get("jmeterArgs") or [])
    return _json(result, 404 if result.get("status") == "NOT_FOUND" else 200)

@mcp.custom_route("/correlate/{jmx_file}", methods=["GET"])
async def http_correlate(request: Request) -> JSONResponse:
    try:
        result = await analyze_jmx_correlations(request.path_params["jmx_file"])
    except Exception as e:
        logger.exception("Correlation request failed")
        return _json({"error": str(e)}, 500)
    if result["status"] != "OK":
        return _json({"error": result["message"]}, _STATUS_CODES.get(result["status"], 500))
    return _json(result["report"])

@mcp.custom_route("/analyze/{run_id}", methods=["GET"])
async def http_analyze(request: Request) -> JSONResponse:
    run_id = request.path_params["run_id"]
    result = analyze_run(run_id)
    if result["status"] != "OK":
        return _json({"error": result["message"]}, _STATUS_CODES.get(result["status"], 500))
    return _json({"runId": run_id, "summary": result["summary"]})

@mcp.custom_route("/reports/{path:path}", methods=["GET"])
async def http_report_file(request: Request):
    """Static files under the reports directory (run dashboards, correlation reports)."""
    reports_root = os.path.abspath(file_utils.REPORTS_DIR)
    target = os.path.abspath(os.path.join(reports_root, request.path_params["path"]))
    if os.path.commonpath([reports_root, target]) != reports_root or not os.path.isfile(target):
        return _json({"error": "Report file not found"}, 404)
    return FileResponse(target)

# -----------------------------
# JMeter MCP entry point
# -----------------------------
if __name__ == "__main__":
    transport = SERVER_CONFIG.get("transport", "stdio")
    try:
        if transport == "http":
            mcp.run(
                transport="http",
                host=SERVER_CONFIG.get("host", "127.0.0.1"),
                port=SERVER_CONFIG.get("port", 4000),
            )
        else:
            mcp.run("stdio")
    except KeyboardInterrupt:
        print("Shutting down JMeter MCP…", file=sys.stderr)
