# services/jmeter_runner.py

from fastmcp import Context  # ✅ FastMCP 2.x import
import asyncio
import base64
import logging
import os
import shutil
import tempfile
import time
import uuid
from typing import List, Optional
from dotenv import load_dotenv
from utils.config import load_config
from utils.file_utils import get_run_dir, resolve_jmx_path
import utils.file_utils as file_utils

logger = logging.getLogger(__name__)

# Load environment variables (JMETER_PATH, etc.)
load_dotenv()

# Load configuration
CONFIG = load_config()
JMETER_CONFIG = CONFIG.get('jmeter', {})

# ----------------------------------------------------------
# Helper Functions
# ----------------------------------------------------------

def _get_jmeter_executable():
    env_path = os.environ.get('JMETER_PATH')
    if env_path:
        return env_path
    bin_dir = JMETER_CONFIG.get('jmeter_bin_path', '')
    start_exe = JMETER_CONFIG.get('jmeter_start_exe', 'jmeter')
    return os.path.join(bin_dir, start_exe) if bin_dir else start_exe

def _get_run_timeout():
    return JMETER_CONFIG.get('run_timeout_seconds', 3600)

def generate_run_id():
    """<8 hex chars>-<epoch ms>, sortable by start time within a prefix."""
    return f"{uuid.uuid4().hex[:8]}-{int(time.time() * 1000)}"

def build_jmeter_command(jmx_path: str, run_dir: str, extra_args: Optional[List[str]] = None) -> List[str]:
    """Non-GUI run writing result.jtl and the HTML dashboard into run_dir."""
    return [
        _get_jmeter_executable(),
        '-n',
        '-t', jmx_path,
        '-l', os.path.join(run_dir, 'result.jtl'),
        '-e',
        '-o', os.path.join(run_dir, 'html'),
        *(extra_args or []),
    ]

# ----------------------------------------------------------
# Main JMeter Runner Functions
# ----------------------------------------------------------

async def run_jmeter_test(jmx_file, jmeter_args=None, ctx: Optional[Context] = None):
    """
    Runs a JMeter test plan in non-GUI mode and waits for it to finish.
    Args:
        jmx_file (str): Script name under the JMX directory, or an absolute path.
        jmeter_args (list[str], optional): Extra JMeter CLI arguments.
        ctx (Context, optional): Workflow context.
    Returns:
        dict: Run status, artifact locations, process output and error (if any).
    """
    try:
        jmx_path = resolve_jmx_path(jmx_file)
    except ValueError as e:
        return {"run_id": None, "status": "ERROR", "error": str(e)}

    if not os.path.isfile(jmx_path):
        msg = f"JMX file not found: {jmx_path}"
        if ctx:
            await ctx.error(msg)
        return {"run_id": None, "status": "NOT_FOUND", "error": msg}

    run_id = generate_run_id()
    run_dir = get_run_dir(run_id, create=True)
    cmd = build_jmeter_command(jmx_path, run_dir, jmeter_args)
    result = {
        "run_id": run_id,
        "jmx_path": jmx_path,
        "run_dir": run_dir,
        "html_dir": os.path.join(run_dir, 'html'),
        "result_file": os.path.join(run_dir, 'result.jtl'),
        "cmd": " ".join(cmd),
    }

    logger.info("Starting JMeter run %s: %s", run_id, result["cmd"])
    if ctx:
        await ctx.info(f"Starting JMeter run {run_id}")

    start_time = time.time()
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            out, err = await asyncio.wait_for(process.communicate(), timeout=_get_run_timeout())
        except asyncio.TimeoutError:
            process.kill()
            out, err = await process.communicate()
            result.update({
                "status": "ERROR",
                "error": f"JMeter run exceeded {_get_run_timeout()}s and was killed",
                "stdout": out.decode(errors="ignore"),
                "stderr": err.decode(errors="ignore"),
                "return_code": process.returncode,
            })
            return result
    except OSError as e:
        msg = f"Failed to start JMeter ({cmd[0]}): {e}"
        logger.error(msg)
        if ctx:
            await ctx.error(msg)
        result.update({"status": "ERROR", "error": msg})
        return result

    status = "COMPLETED" if process.returncode == 0 else "FAILED"
    result.update({
        "status": status,
        "return_code": process.returncode,
        "stdout": out.decode(errors="ignore"),
        "stderr": err.decode(errors="ignore"),
        "error": None if status == "COMPLETED" else f"JMeter exited with code {process.returncode}",
        "duration_seconds": round(time.time() - start_time, 2),
        "report_url": f"/reports/{run_id}/html/index.html",
    })
    logger.info("JMeter run %s finished: %s", run_id, status)
    return result

def list_jmx_scripts() -> dict:
    """
    Lists the .jmx scripts available under the configured JMX directory.

    Does NOT create the directory if it doesn't exist.
    Returns:
        dict: {
            "jmx_dir": str,
            "scripts": [
                {
                    "filename": str,
                    "full_path": str,
                    "size_bytes": int,
                    "modified_time_utc": str
                },
                ...
            ],
            "count": int,
            "status": "OK" | "NOT_FOUND" | "EMPTY",
            "message": str
        }
    """
    jmx_dir = file_utils.JMX_DIR

    if not os.path.isdir(jmx_dir):
        return {
            "jmx_dir": jmx_dir,
            "scripts": [],
            "count": 0,
            "status": "NOT_FOUND",
            "message": "JMX directory does not exist."
        }

    scripts = []
    for name in sorted(os.listdir(jmx_dir)):
        if not name.lower().endswith(".jmx"):
            continue

        full_path = os.path.join(jmx_dir, name)
        try:
            size_bytes = os.path.getsize(full_path)
            mtime = os.path.getmtime(full_path)
            modified_time_utc = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(mtime))
        except OSError:
            size_bytes = None
            modified_time_utc = None

        scripts.append(
            {
                "filename": name,
                "full_path": full_path,
                "size_bytes": size_bytes,
                "modified_time_utc": modified_time_utc,
            }
        )

    status = "OK" if scripts else "EMPTY"
    message = (
        "JMeter scripts found."
        if scripts
        else "JMX directory exists but contains no .jmx files."
    )

    return {
        "jmx_dir": jmx_dir,
        "scripts": scripts,
        "count": len(scripts),
        "status": status,
        "message": message,
    }

def build_report_zip(run_id: str) -> dict:
    """
    Zips the HTML dashboard of a run and returns it base64-encoded.
    Raises:
        FileNotFoundError: if the run has no HTML report.
        ValueError: if run_id points outside the reports directory.
    """
    html_dir = os.path.join(get_run_dir(run_id), 'html')
    if not os.path.isdir(html_dir):
        raise FileNotFoundError(f"Report not found for run '{run_id}'")

    with tempfile.TemporaryDirectory() as tmp_dir:
        archive = shutil.make_archive(os.path.join(tmp_dir, run_id), 'zip', root_dir=html_dir)
        with open(archive, 'rb') as f:
            data = base64.b64encode(f.read()).decode('ascii')

    return {"file_name": f"{run_id}.zip", "data": data}

def cleanup_reports() -> dict:
    """Deletes every run directory and correlation report, then recreates the reports directory."""
    reports_dir = file_utils.REPORTS_DIR
    shutil.rmtree(reports_dir, ignore_errors=True)
    os.makedirs(reports_dir, exist_ok=True)
    logger.info("Reports directory cleaned: %s", reports_dir)
    return {"status": "OK", "reports_dir": reports_dir, "message": "cleanup-complete"}
